"""
Runtime wiring for an application hosting the contract kernel.

``bootstrap`` takes an already loaded configuration (see
``contract_config.get_active_config``) and performs the one-time process
setup: structured logging, the database engine and the append-only
listeners.  It returns the session factory the services are built with.

    config = get_active_config()
    session_factory = bootstrap(config)
    orchestrator = ContractCreationOrchestrator(session_factory)
"""

from sqlalchemy.orm import Session, sessionmaker

from contract_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from contract_kernel.db.immutability import register_immutability_listeners
from contract_kernel.logging_config import configure_logging, get_logger

logger = get_logger("runtime")


def bootstrap(config, create_schema: bool = False) -> sessionmaker[Session]:
    """
    Configure logging, the engine and immutability enforcement.

    Args:
        config: A ``KernelConfig`` (anything exposing ``database`` and
            ``logging`` sections with the same fields).
        create_schema: Create missing tables.  Development and tests only;
            production schemas are managed by migrations.
    """
    configure_logging(level=config.logging.level)

    db = config.database
    init_engine_from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_recycle=db.pool_recycle,
    )
    register_immutability_listeners()
    if create_schema:
        create_tables()

    logger.info(
        "kernel_bootstrapped",
        extra={"config_id": config.config_id, "checksum": config.checksum},
    )
    return get_session_factory()
