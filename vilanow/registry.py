"""
Composition root for the persistence layer.

``StoreFactory`` turns a collection name into a ``RecordStore`` for the backend
configured for it; ``ModelRegistry`` builds one store per collection at start-up
and hands each to its entity model. Routers and services receive the registry
(through ``app.state``) instead of importing global model instances.
"""
from __future__ import annotations

import logging
from typing import Callable

from vilanow.core.config import BACKEND_JSON, BACKEND_SQL, Settings, get_settings
from vilanow.db.session import get_engine
from vilanow.models import (
    AdminActionModel,
    BadgeModel,
    ChallengeModel,
    ChatMessageModel,
    ChatSessionModel,
    CollaborationModel,
    CreditBundleModel,
    FlagModel,
    GroupMessageModel,
    GroupModel,
    InspectionModel,
    InterestModel,
    KYCModel,
    MarketplaceOfferModel,
    NotificationModel,
    PropertyModel,
    PropertyRequestModel,
    QuestModel,
    SessionModel,
    SettingModel,
    TerritoryModel,
    TransactionModel,
    UserModel,
)
from vilanow.models.base import EntityModel
from vilanow.repositories import JsonRecordStore, RecordStore, SQLRecordStore

logger = logging.getLogger(__name__)

StoreBuilder = Callable[[str], RecordStore]


class StoreFactory:
    """Builds the store for a collection according to ``Settings.backend_for``."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def __call__(self, collection: str) -> RecordStore:
        backend = self.settings.backend_for(collection)
        if backend == BACKEND_SQL:
            return SQLRecordStore(collection, get_engine(self.settings.database_url))
        if backend == BACKEND_JSON:
            return JsonRecordStore.in_directory(collection, self.settings.data_dir)
        raise ValueError(f"Unknown storage backend {backend!r} for {collection!r}")


class ModelRegistry:
    """Every entity model of the application, each over its own store."""

    def __init__(self, build_store: StoreBuilder):
        def _model(cls):
            return cls(build_store(cls.collection))

        self.users: UserModel = _model(UserModel)
        self.properties: PropertyModel = _model(PropertyModel)
        self.interests: InterestModel = _model(InterestModel)
        self.chat_sessions: ChatSessionModel = _model(ChatSessionModel)
        self.chat_messages: ChatMessageModel = _model(ChatMessageModel)
        self.credit_bundles: CreditBundleModel = _model(CreditBundleModel)
        self.transactions: TransactionModel = _model(TransactionModel)
        self.sessions: SessionModel = _model(SessionModel)
        self.notifications: NotificationModel = _model(NotificationModel)
        self.groups: GroupModel = _model(GroupModel)
        self.group_messages: GroupMessageModel = _model(GroupMessageModel)
        self.quests: QuestModel = _model(QuestModel)
        self.challenges: ChallengeModel = _model(ChallengeModel)
        self.territories: TerritoryModel = _model(TerritoryModel)
        self.badges: BadgeModel = _model(BadgeModel)
        self.marketplace_offers: MarketplaceOfferModel = _model(MarketplaceOfferModel)
        self.collaborations: CollaborationModel = _model(CollaborationModel)
        self.kyc: KYCModel = _model(KYCModel)
        self.flags: FlagModel = _model(FlagModel)
        self.admin_actions: AdminActionModel = _model(AdminActionModel)
        self.app_settings: SettingModel = _model(SettingModel)
        self.property_requests: PropertyRequestModel = _model(PropertyRequestModel)
        self.inspections: InspectionModel = _model(InspectionModel)

    def models(self) -> list[EntityModel]:
        return [value for value in vars(self).values() if isinstance(value, EntityModel)]

    def backends(self) -> dict[str, str]:
        """Collection name -> active backend, for health reporting."""
        return {model.collection: model.store.backend for model in self.models()}

    def seed_defaults(self) -> None:
        added = self.credit_bundles.seed_defaults() + self.app_settings.seed_defaults()
        if added:
            logger.info("Seeded %d default records", added)


def build_registry(settings: Settings | None = None, *, seed: bool = True) -> ModelRegistry:
    settings = settings or get_settings()
    registry = ModelRegistry(StoreFactory(settings))
    if seed:
        registry.seed_defaults()
    return registry
