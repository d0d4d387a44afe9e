"""DI container. Wire via init_container(); endpoints use Depends(Provide[Container.*]).

Every core object receives its collaborators through its constructor; the
container only declares that wiring once.
"""
from typing import Annotated

from dependency_injector import containers, providers
from dependency_injector.wiring import Provide
from fastapi import Depends

from price_ticker.config import Settings
from price_ticker.db import PriceStore, create_db_engine
from price_ticker.error_mapper import ServiceErrorMapper
from price_ticker.providers import BinanceBookTickerClient
from price_ticker.services import PollingWorker, PriceCalculator, PriceService


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(
        modules=[
            "price_ticker.routers.price",
            "price_ticker.routers.status",
            "price_ticker.routers.health",
            "price_ticker.routers.metrics",
        ]
    )

    settings = providers.Singleton(Settings.from_env)

    engine = providers.Singleton(
        create_db_engine,
        settings.provided.database_url,
        settings.provided.sql_echo,
    )
    store = providers.Singleton(PriceStore, engine)

    market_client = providers.Singleton(
        BinanceBookTickerClient,
        symbol=settings.provided.symbol,
        base_url=settings.provided.binance_base_url,
        timeout=settings.provided.request_timeout_seconds,
    )
    calculator = providers.Singleton(
        PriceCalculator, commission=settings.provided.commission
    )

    price_service = providers.Singleton(
        PriceService,
        market_client,
        calculator,
        store,
        symbol=settings.provided.symbol,
    )
    worker = providers.Singleton(
        PollingWorker,
        price_service,
        update_interval_ms=settings.provided.update_interval_ms,
        max_retries=settings.provided.max_retries,
    )

    error_mapper = providers.Singleton(ServiceErrorMapper, api_name="Binance")


# Type aliases for route injection (avoid repeating Annotated[...] in every route)
SettingsDep = Annotated[Settings, Depends(Provide[Container.settings])]
PriceServiceDep = Annotated[PriceService, Depends(Provide[Container.price_service])]
PriceStoreDep = Annotated[PriceStore, Depends(Provide[Container.store])]
WorkerDep = Annotated[PollingWorker, Depends(Provide[Container.worker])]
ErrorMapperDep = Annotated[ServiceErrorMapper, Depends(Provide[Container.error_mapper])]


def init_container() -> Container:
    """Create container and wire to router modules."""
    container = Container()
    container.wire()
    return container
