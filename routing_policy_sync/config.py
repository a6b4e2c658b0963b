"""
Configuration for Routing Policy Sync.
"""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NodeCategory(str, Enum):
    """Node category types."""

    ENTRY_POINT = "entry_point"
    CONTAINER = "container"
    CHILD = "child"


class NodeType(str, Enum):
    """Graph node types."""

    # Containers
    ACTION = "action"
    SWITCH_BOARD = "switchBoard"
    NATTERBOX_AI = "natterboxAI"
    FINISH = "finish"
    TO_POLICY = "toPolicy"
    OMNI_CHANNEL_FLOW = "omniChannelFlow"

    # Entry points
    INBOUND_NUMBER = "inboundNumber"
    EXTENSION_NUMBER = "extensionNumber"
    SIP_TRUNK = "sipTrunk"
    INBOUND_MESSAGE = "inboundMessage"
    DIGITAL = "digital"
    FROM_POLICY = "fromPolicy"
    INVOKABLE_DESTINATION = "invokableDestination"


class ChildItemType(str, Enum):
    """Types of items owned by a container node."""

    # Call handling
    SPEAK = "speak"
    CALL_QUEUE = "callQueue"
    HUNT_GROUP = "huntGroup"
    VOICEMAIL = "voicemail"
    RULE = "rule"
    CONNECT_CALL = "connectCall"
    RECORD_CALL = "recordCall"
    NOTIFY = "notify"
    SWITCH_ITEM = "switchItem"
    GET_INFO = "getInfo"
    ROUTE = "route"
    RETRY = "retry"

    # AI
    AI_AGENT = "aiAgent"
    AI_INSTRUCTION = "aiInstruction"
    AI_KNOWLEDGE = "aiKnowledge"

    # CRM / integrations
    EVENT = "event"
    QUERY_OBJECT = "queryObject"
    CREATE_RECORD = "createRecord"
    MANAGE_PROPERTIES = "manageProperties"
    REQUEST_SKILL = "requestSkill"

    # Digital
    SEND_MESSAGE = "sendMessage"
    SEND_TEMPLATE = "sendTemplate"
    OMNI_CHANNEL_ROUTE = "omniChannelRoute"

    # Utility
    DEBUG = "debug"


class EdgeKind(str, Enum):
    """Edge (transition) kinds."""

    DEFAULT = "default"
    BRANCH = "branch"
    FAILURE = "failure"
    TIMEOUT = "timeout"


class PolicyType(str, Enum):
    """Policy document types."""

    CALL = "CALL"
    NON_CALL = "NON_CALL"
    DIGITAL = "DIGITAL"


class EventType(str, Enum):
    """Known event subscription types."""

    SALESFORCE = "salesforce"
    WEBHOOK = "webhook"
    SCHEDULED = "scheduled"
    PLATFORM_EVENT = "platformEvent"


class PolicyEngineSettings(BaseSettings):
    """Policy engine connection settings."""

    model_config = SettingsConfigDict(env_prefix="SAPIEN_")

    host: str = Field(
        default="https://sapien.redmatter.com/v1",
        description="Policy engine base URL",
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    max_retries: int = Field(default=0, ge=0, description="Connection-level retries")


class EventsSettings(BaseSettings):
    """Event subscription service settings."""

    model_config = SettingsConfigDict(env_prefix="EVENTS_")

    host: str = Field(
        default="https://external-events-us.natterbox.net",
        description="Event subscription service base URL",
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    max_retries: int = Field(default=0, ge=0, description="Connection-level retries")


class ValidationSettings(BaseSettings):
    """Local graph validation settings."""

    model_config = SettingsConfigDict(env_prefix="VALIDATION_")

    # Extension numbers
    extension_min: int = Field(default=2000, description="Lowest valid extension number")
    extension_max: int = Field(default=7999, description="Highest valid extension number")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    organization_id: Optional[int] = Field(default=None, description="Organization ID")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="info", description="Log level")

    # Credentials
    credential_scope: str = Field(
        default="routing-policies:admin",
        description="Scope required for policy administration",
    )
    jwt_lifetime_seconds: int = Field(
        default=300,
        description="Lifetime assumed for tokens without an exp claim",
    )
    expiry_leeway_seconds: int = Field(
        default=30,
        description="Treat credentials expiring within this window as expired",
    )

    # Sub-configurations
    policy_engine: PolicyEngineSettings = Field(default_factory=PolicyEngineSettings)
    events: EventsSettings = Field(default_factory=EventsSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()
