"""Schema management for the order desk's relational stores."""

from protean.domain import Domain
from sqlalchemy import create_engine

from orderdesk.scoreboard.sql_adapter import SqlFulfillmentScoreboard
from orderdesk.utils.config import custom_setting

_RELATIONAL_PROVIDERS = ("sqlite", "postgresql")


def _register_models(domain: Domain, provider_name: str) -> None:
    # Touching a repository's _dao registers its model with the provider's metadata.
    registry = domain.registry
    for records in (registry.aggregates, registry.entities, registry.projections):
        for _, record in records.items():
            if record.cls.meta_.provider == provider_name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain, include_scoreboard: bool = True) -> None:
    """Create provider tables and, optionally, the fulfillment scoreboard table."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in _RELATIONAL_PROVIDERS:
                _register_models(domain, provider.name)
                provider._metadata.create_all(create_engine(provider.conn_info["database_uri"]))

        if include_scoreboard:
            SqlFulfillmentScoreboard(database_uri=custom_setting("scoreboard_database_uri")).create_schema()


def drop_db(domain: Domain, include_scoreboard: bool = True) -> None:
    """Drop everything setup_db created."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in _RELATIONAL_PROVIDERS:
                provider._metadata.drop_all(create_engine(provider.conn_info["database_uri"]))

        if include_scoreboard:
            SqlFulfillmentScoreboard(database_uri=custom_setting("scoreboard_database_uri")).drop_schema()
