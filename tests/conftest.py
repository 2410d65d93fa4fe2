import pytest
from sqlalchemy.orm import sessionmaker

from ntoken.contracts import ExecutionContext, StaticAccountDirectory
from ntoken.database.connection import make_engine
from ntoken.models.base import Base
from ntoken.services.allowance_store import AllowanceStore
from ntoken.services.authorization import AuthorizationGate
from ntoken.services.balance_query_service import BalanceQueryService
from ntoken.services.capabilities import CREDENTIAL_PROFILE, GENERIC_PROFILE
from ntoken.services.global_state import GlobalState
from ntoken.services.ledger import Ledger
from ntoken.services.symbol_registry import SymbolRegistry

ACCOUNTS = [
    "alice",
    "bob",
    "carol",
    "dave",
    "flon",
    "flonian",
    "flon.ntoken",
    "armoniaadmin",
    "notary1",
]


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    import logging
    import structlog

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(),
    )

    root_logger = logging.getLogger()
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def _session_factory():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    engine, TestingSessionLocal = _session_factory()
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def credential_session():
    """A second, independent ledger database holding credentials."""
    engine, TestingSessionLocal = _session_factory()
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def accounts():
    return StaticAccountDirectory(ACCOUNTS)


@pytest.fixture
def global_state():
    return GlobalState()


@pytest.fixture
def make_ctx(global_state, accounts):
    def _make(*signers):
        return ExecutionContext(state=global_state, accounts=accounts, signers=frozenset(signers))

    return _make


@pytest.fixture
def gate():
    return AuthorizationGate()


@pytest.fixture
def registry(db_session, gate):
    return SymbolRegistry(db_session, gate)


@pytest.fixture
def allowances(db_session):
    return AllowanceStore(db_session)


@pytest.fixture
def ledger(db_session, allowances):
    return Ledger(db_session, allowances, GENERIC_PROFILE)


@pytest.fixture
def credential_ledger(db_session, allowances):
    return Ledger(db_session, allowances, CREDENTIAL_PROFILE)


@pytest.fixture
def queries(db_session):
    return BalanceQueryService(db_session)
