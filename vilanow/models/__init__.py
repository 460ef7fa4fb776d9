"""
Entity models: one class per record kind, each wrapping a RecordStore.

Models are plain classes built by ``vilanow.registry.ModelRegistry``; there are
no module-level instances, so every store handle is passed in explicitly.
"""

from .admin import AdminActionModel, FlagModel, KYCModel, SettingModel
from .base import EntityModel
from .chat import ChatMessageModel, ChatSessionModel
from .credits import CreditBundleModel, TransactionModel
from .gamification import BadgeModel, ChallengeModel, QuestModel, TerritoryModel
from .groups import GroupMessageModel, GroupModel
from .inspections import InspectionModel
from .interests import InterestModel
from .marketplace import CollaborationModel, MarketplaceOfferModel
from .notifications import NotificationModel
from .properties import PropertyFilters, PropertyModel
from .property_requests import PropertyRequestModel, RequestFilters
from .sessions import SessionModel
from .users import UserModel

ALL_MODELS = (
    UserModel,
    PropertyModel,
    InterestModel,
    ChatSessionModel,
    ChatMessageModel,
    CreditBundleModel,
    TransactionModel,
    SessionModel,
    NotificationModel,
    GroupModel,
    GroupMessageModel,
    QuestModel,
    ChallengeModel,
    TerritoryModel,
    BadgeModel,
    MarketplaceOfferModel,
    CollaborationModel,
    KYCModel,
    FlagModel,
    AdminActionModel,
    SettingModel,
    PropertyRequestModel,
    InspectionModel,
)

__all__ = [
    "ALL_MODELS",
    "AdminActionModel",
    "BadgeModel",
    "ChallengeModel",
    "ChatMessageModel",
    "ChatSessionModel",
    "CollaborationModel",
    "CreditBundleModel",
    "EntityModel",
    "FlagModel",
    "GroupMessageModel",
    "GroupModel",
    "InspectionModel",
    "InterestModel",
    "KYCModel",
    "MarketplaceOfferModel",
    "NotificationModel",
    "PropertyFilters",
    "PropertyModel",
    "PropertyRequestModel",
    "QuestModel",
    "RequestFilters",
    "SessionModel",
    "SettingModel",
    "TerritoryModel",
    "TransactionModel",
    "UserModel",
]
