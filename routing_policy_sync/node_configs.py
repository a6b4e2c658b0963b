"""
Typed configuration payloads for nodes and child items.

Each model accepts the camelCase keys used by the policy document and
keeps unknown keys as extras so platform-specific fields survive a
round trip.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ItemConfig(BaseModel):
    """Base configuration payload."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


# =============================================================================
# Node data
# =============================================================================


class ExtensionNumberData(ItemConfig):
    extension: Optional[Union[int, str]] = Field(default=None, alias="internalExtension")


class InboundNumberData(ItemConfig):
    phone_numbers: List[str] = Field(default_factory=list, alias="phoneNumbers")


class SipTrunkData(ItemConfig):
    trunk_id: Optional[str] = Field(default=None, alias="trunkId")


class InboundMessageData(ItemConfig):
    channel: Optional[str] = None


class DigitalData(ItemConfig):
    channel: Optional[str] = None
    address: Optional[str] = None


class PolicyLinkData(ItemConfig):
    """Data for fromPolicy/toPolicy nodes."""

    policy_id: Optional[int] = Field(default=None, alias="policyId")


class InvokableDestinationData(ItemConfig):
    destination: Optional[str] = None


class NatterboxAIData(ItemConfig):
    agent_id: Optional[str] = Field(default=None, alias="agentId")


# =============================================================================
# Child item configuration
# =============================================================================


class SpeakConfig(ItemConfig):
    text: Optional[str] = None
    sound_id: Optional[str] = Field(default=None, alias="soundId")
    voice: Optional[str] = None
    language: Optional[str] = None


class CallQueueConfig(ItemConfig):
    queue_id: Optional[str] = Field(default=None, alias="queueId")
    timeout: Optional[int] = Field(default=None, ge=0)
    hold_music_id: Optional[str] = Field(default=None, alias="holdMusicId")


class HuntGroupConfig(ItemConfig):
    group_id: Optional[str] = Field(default=None, alias="groupId")
    ring_strategy: Optional[str] = Field(default=None, alias="ringStrategy")
    timeout: Optional[int] = Field(default=None, ge=0)


class VoicemailConfig(ItemConfig):
    mailbox_id: Optional[str] = Field(default=None, alias="mailboxId")
    greeting_sound_id: Optional[str] = Field(default=None, alias="greetingSoundId")


class RuleConfig(ItemConfig):
    conditions: List[Dict[str, Any]] = Field(default_factory=list)
    time_zone: Optional[str] = Field(default=None, alias="timeZone")


class ConnectCallConfig(ItemConfig):
    destination: Optional[str] = None
    timeout: Optional[int] = Field(default=None, ge=0)
    caller_id: Optional[str] = Field(default=None, alias="callerId")


class RecordCallConfig(ItemConfig):
    record: bool = True
    analyse: bool = False


class NotifyConfig(ItemConfig):
    recipients: List[str] = Field(default_factory=list)
    message: Optional[str] = None


class SwitchItemConfig(ItemConfig):
    variable: Optional[str] = None
    options: List[Dict[str, Any]] = Field(default_factory=list)


class GetInfoConfig(ItemConfig):
    prompt: Optional[str] = None
    variable: Optional[str] = None
    max_digits: Optional[int] = Field(default=None, alias="maxDigits", ge=1)


class RouteConfig(ItemConfig):
    destination: Optional[str] = None


class RetryConfig(ItemConfig):
    max_attempts: Optional[int] = Field(default=None, alias="maxAttempts", ge=1)


class AiAgentConfig(ItemConfig):
    agent_id: Optional[str] = Field(default=None, alias="agentId")
    prompt: Optional[str] = None


class AiInstructionConfig(ItemConfig):
    instruction: Optional[str] = None


class AiKnowledgeConfig(ItemConfig):
    knowledge_base_id: Optional[str] = Field(default=None, alias="knowledgeBaseId")


class EventConfig(ItemConfig):
    """Configuration of an event trigger."""

    event_type: str = Field(default="salesforce", alias="eventType", min_length=1)
    enabled: bool = True
    event_name: Optional[str] = Field(default=None, alias="eventName")
    filters: List[Dict[str, Any]] = Field(default_factory=list)


class QueryObjectConfig(ItemConfig):
    object_name: Optional[str] = Field(default=None, alias="objectName")
    query: Optional[str] = None
    field_names: List[str] = Field(default_factory=list, alias="fields")


class CreateRecordConfig(ItemConfig):
    object_name: Optional[str] = Field(default=None, alias="objectName")
    field_values: Dict[str, Any] = Field(default_factory=dict, alias="fieldValues")


class ManagePropertiesConfig(ItemConfig):
    properties: Dict[str, Any] = Field(default_factory=dict)


class RequestSkillConfig(ItemConfig):
    skills: List[str] = Field(default_factory=list)


class SendMessageConfig(ItemConfig):
    message: Optional[str] = None
    channel: Optional[str] = None


class SendTemplateConfig(ItemConfig):
    message_template_id: Optional[str] = Field(default=None, alias="messageTemplateId")
    channel: Optional[str] = None


class OmniChannelRouteConfig(ItemConfig):
    queue_id: Optional[str] = Field(default=None, alias="queueId")
    channel: Optional[str] = None


class DebugConfig(ItemConfig):
    level: str = "info"
    message: Optional[str] = None
