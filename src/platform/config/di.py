"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.ride_pool.app.service.best_effort_notifier import BestEffortNotifier
from src.service.ride_pool.driven_adapter.notification.ride_message_notification_sender_impl import (
    RideMessageNotificationSenderImpl,
)
from src.service.ride_pool.driven_adapter.repo.booking_query_repo_impl import BookingQueryRepoImpl
from src.service.ride_pool.driven_adapter.repo.ride_message_repo_impl import RideMessageRepoImpl
from src.service.ride_pool.driven_adapter.repo.ride_query_repo_impl import RideQueryRepoImpl
from src.service.ride_pool.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Database (engine is created lazily on the running event loop)
    database = providers.Singleton(Database)

    # Ledger writes: a fresh Unit of Work (own session, own transaction) per operation
    unit_of_work = providers.Factory(
        SqlAlchemyUnitOfWork, session_maker=database.provided.session_maker
    )

    # Read-side repositories (stateless - use session_factory per call)
    ride_query_repo = providers.Singleton(
        RideQueryRepoImpl, session_factory=database.provided.session
    )
    booking_query_repo = providers.Singleton(
        BookingQueryRepoImpl, session_factory=database.provided.session
    )
    ride_message_repo = providers.Singleton(
        RideMessageRepoImpl, session_factory=database.provided.session
    )

    # Post-commit notifications
    notification_sender = providers.Singleton(
        RideMessageNotificationSenderImpl, message_repo=ride_message_repo
    )
    notifier = providers.Singleton(BestEffortNotifier, notification_sender=notification_sender)

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)


container = Container()
