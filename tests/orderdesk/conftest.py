import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def orderdesk_bed():
    from orderdesk.domain import orderdesk

    bed = DomainFixture(orderdesk)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(orderdesk_bed):
    with orderdesk_bed.domain_context():
        yield


@pytest.fixture()
def refunds():
    from orderdesk.refunds import get_refund_service

    return get_refund_service()


@pytest.fixture()
def notifications():
    from orderdesk.channel import get_notification_service

    return get_notification_service()


@pytest.fixture()
def customers():
    from orderdesk.directory import get_customer_directory

    return get_customer_directory()


@pytest.fixture()
def businesses():
    from orderdesk.directory import get_business_directory

    return get_business_directory()


@pytest.fixture()
def table_sessions():
    from orderdesk.directory import get_table_sessions

    return get_table_sessions()


@pytest.fixture()
def scoreboard():
    from orderdesk.scoreboard import get_scoreboard

    return get_scoreboard()
