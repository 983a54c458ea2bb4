"""Service test fixtures — async DB, seeded catalog, fake collaborators, test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - db_manager is patched for the whole test: audit rows and receipt counters
      are written through it, outside the request session
    - The clock is frozen and only moves when a test advances it
    - get_db, get_clock, get_settings and the collaborators are overridden for route tests

Design Decisions:
    - SQLite in-memory with StaticPool: every session shares one connection, so
      rows committed by one session are visible to the next
    - Fake notifier/alerter/payout adapter record calls instead of mocking methods
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool

import remit.infrastructure.database as db_module
from remit.api import dependencies
from remit.config import Settings, get_settings
from remit.db.base import Base
from remit.infrastructure.database import DatabaseSessionManager, get_db
from remit.main import app
from remit.models.asset import Asset
from remit.models.corridor import Corridor
from remit.models.route import Route
from remit.services.audit_log import SqlAuditLog
from remit.services.catalog import SqlAssetCatalog, SqlRouteCatalog
from remit.services.quote_engine import QuoteEngine, QuoteOverrides
from remit.services.rate_limiter import RateLimiter
from remit.services.rate_oracle import MockRateProvider, RateOracle
from remit.services.side_effects import SideEffects
from remit.services.transfer_orchestrator import Caller, TransferOrchestrator

from tests.services.fakes import (
    FrozenClock, RecordingAlerter, RecordingNotifier, fixed_adapters,
)


# ─── Database ───────────────────────────────────────────────────

@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
async def fake_db_manager(test_engine, test_session_factory):
    """Route side-channel writers (audit log, receipt counters) to the test DB."""
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager
    yield fake_manager
    db_module.db_manager = original_manager


# ─── Catalog seed ───────────────────────────────────────────────

@pytest.fixture
async def catalog(test_db):
    """Assets, corridors and routes shared by service and route tests.

    USD->GHS: AccessBank (BANK), Ecobank (BANK), MTN MoMo (MOBILE_MONEY),
              Vodafone Cash (inactive)
    USD->BTC: Strike (LIGHTNING)
    BTC->GHS: active corridor without routes
    GHS->USD: inactive corridor
    """
    usd = Asset(code="USD", name="US Dollar", symbol="$", decimals=2)
    ghs = Asset(code="GHS", name="Ghana Cedi", symbol="₵", decimals=2)
    btc = Asset(code="BTC", name="Bitcoin", symbol="₿", decimals=8, kind="CRYPTO")
    ngn = Asset(code="NGN", name="Naira", decimals=2, is_active=False)
    test_db.add_all([usd, ghs, btc, ngn])
    await test_db.flush()

    usd_ghs = Corridor(from_asset_id=usd.id, to_asset_id=ghs.id)
    usd_btc = Corridor(from_asset_id=usd.id, to_asset_id=btc.id)
    btc_ghs = Corridor(from_asset_id=btc.id, to_asset_id=ghs.id)
    ghs_usd = Corridor(from_asset_id=ghs.id, to_asset_id=usd.id, is_active=False)
    test_db.add_all([usd_ghs, usd_btc, btc_ghs, ghs_usd])
    await test_db.flush()

    routes = {
        "access": Route(
            corridor_id=usd_ghs.id, rail="BANK", provider="AccessBank",
            fee_fixed=1.5, fee_pct=1.0, fx_margin_pct=1.2,
            eta_min_minutes=60, eta_max_minutes=240,
        ),
        "ecobank": Route(
            corridor_id=usd_ghs.id, rail="BANK", provider="Ecobank",
            fee_fixed=2.0, fee_pct=0.5, fx_margin_pct=1.0,
            eta_min_minutes=120, eta_max_minutes=1440,
        ),
        "mtn": Route(
            corridor_id=usd_ghs.id, rail="MOBILE_MONEY", provider="MTN MoMo",
            fee_fixed=0.99, fee_pct=1.5, fx_margin_pct=1.5,
            eta_min_minutes=1, eta_max_minutes=10,
        ),
        "vodafone": Route(
            corridor_id=usd_ghs.id, rail="MOBILE_MONEY", provider="Vodafone Cash",
            fee_fixed=0.1, fee_pct=0.1, fx_margin_pct=0.1,
            eta_min_minutes=1, eta_max_minutes=2, is_active=False,
        ),
        "strike": Route(
            corridor_id=usd_btc.id, rail="LIGHTNING", provider="Strike",
            fee_fixed=0.0, fee_pct=1.0, fx_margin_pct=0.5,
            eta_min_minutes=1, eta_max_minutes=2,
        ),
    }
    test_db.add_all(routes.values())
    await test_db.commit()
    return {
        "assets": {"USD": usd, "GHS": ghs, "BTC": btc, "NGN": ngn},
        "corridors": {
            "USD-GHS": usd_ghs, "USD-BTC": usd_btc,
            "BTC-GHS": btc_ghs, "GHS-USD": ghs_usd,
        },
        "routes": routes,
    }


# ─── Collaborators ──────────────────────────────────────────────

@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        app_env="test",
        payouts_mode="simulated",
        rate_provider="mock",
        smtp_host=None,
    )


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def oracle():
    return RateOracle(MockRateProvider(), ttl_seconds=30)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def alerter():
    return RecordingAlerter()


@pytest.fixture
def caller():
    return Caller(identity="user-1", user_id="user-1", user_email="ama@example.com")


@pytest.fixture
def quote_engine(test_db, oracle, settings, clock):
    return QuoteEngine(
        test_db, SqlAssetCatalog(test_db), SqlRouteCatalog(test_db), oracle,
        SqlAuditLog(), SideEffects(), settings, clock,
    )


@pytest.fixture
def make_quote(quote_engine, catalog):
    """Create a quote on a seeded corridor; defaults to USD->GHS BANK at 12.35."""
    async def _make(
        rail: str = "BANK", from_asset: str = "USD", to_asset: str = "GHS",
        send_amount: float = 100.0, market_rate: float | None = 12.35,
    ):
        return await quote_engine.create_quote(
            from_asset, to_asset, rail, send_amount,
            QuoteOverrides(market_rate=market_rate),
        )
    return _make


@pytest.fixture
def make_orchestrator(test_db, settings, clock, notifier, alerter):
    """Build a TransferOrchestrator on the test session; keyword overrides win."""
    def _make(**overrides) -> TransferOrchestrator:
        options = dict(
            db=test_db,
            limiter=RateLimiter(test_db, clock),
            routes=SqlRouteCatalog(test_db),
            adapters=fixed_adapters(),
            notifier=notifier,
            audit=SqlAuditLog(),
            alerter=alerter,
            side_effects=SideEffects(),
            settings=settings,
            clock=clock,
        )
        options.update(overrides)
        return TransferOrchestrator(**options)
    return _make


# ─── HTTP client ────────────────────────────────────────────────

@pytest.fixture
async def client(test_session_factory, catalog, settings, clock, oracle, notifier):
    """FastAPI test client with DB, clock, settings and collaborators overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[dependencies.get_clock] = lambda: clock
    app.dependency_overrides[dependencies.get_oracle] = lambda: oracle
    app.dependency_overrides[dependencies.get_notifier] = lambda: notifier

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
