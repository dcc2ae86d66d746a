from hubproxy.tests.fixtures_clients import *  # noqa
from hubproxy.tests.fixtures_upstream import *  # noqa
