"""
Node Type Definitions.

Definitions for every node type and child item type a policy graph can hold,
including the template identifiers the policy engine uses for them.
"""

from .. import node_configs as cfg
from ..config import ChildItemType, NodeCategory, NodeType
from ..models import ChildItemDefinition, NodeDefinition


# =============================================================================
# Container Nodes
# =============================================================================

CONTAINER_NODES = [
    NodeDefinition(
        type=NodeType.ACTION,
        category=NodeCategory.CONTAINER,
        name="Action",
        template_id=4,
        template_class="ModAction",
        template_id_aliases=(94, 142),
        template_class_aliases=("ModDigitalAction",),
        multiple_outputs=True,
    ),
    NodeDefinition(
        type=NodeType.SWITCH_BOARD,
        category=NodeCategory.CONTAINER,
        name="Switchboard",
        template_id=9,
        template_class="ModSwitchboard",
        multiple_outputs=True,
    ),
    NodeDefinition(
        type=NodeType.NATTERBOX_AI,
        category=NodeCategory.CONTAINER,
        name="Natterbox AI",
        template_id=145,
        template_class="ModNatterboxAI",
        template_id_aliases=(146, 147),
        multiple_outputs=True,
        config_model=cfg.NatterboxAIData,
    ),
    NodeDefinition(
        type=NodeType.FINISH,
        category=NodeCategory.CONTAINER,
        name="Finish",
        template_id=23,
        template_class="ModFinish",
        template_id_aliases=(58, 120, 144, 16, 141),
        template_class_aliases=("ModFinishAnalytics", "ModDigitalFinish"),
        outputs_allowed=False,
        terminal=True,
    ),
    NodeDefinition(
        type=NodeType.TO_POLICY,
        category=NodeCategory.CONTAINER,
        name="To Policy",
        template_id=66,
        template_class="ModToPolicy",
        outputs_allowed=False,
        terminal=True,
        config_model=cfg.PolicyLinkData,
    ),
    NodeDefinition(
        type=NodeType.OMNI_CHANNEL_FLOW,
        category=NodeCategory.CONTAINER,
        name="Omni-Channel Flow",
        template_id=117,
        template_class="ModOmniChannelFlow",
        multiple_outputs=True,
    ),
]


# =============================================================================
# Entry Point Nodes
# =============================================================================

ENTRY_POINT_NODES = [
    NodeDefinition(
        type=NodeType.INBOUND_NUMBER,
        category=NodeCategory.ENTRY_POINT,
        name="Inbound Numbers",
        template_id=3,
        template_class="ModNumber",
        template_id_aliases=(38,),
        template_class_aliases=("ModNumber_Public",),
        inputs_allowed=False,
        config_model=cfg.InboundNumberData,
    ),
    NodeDefinition(
        type=NodeType.EXTENSION_NUMBER,
        category=NodeCategory.ENTRY_POINT,
        name="Extension Number",
        template_id=31,
        template_class="ModExtension",
        inputs_allowed=False,
        config_model=cfg.ExtensionNumberData,
    ),
    NodeDefinition(
        type=NodeType.SIP_TRUNK,
        category=NodeCategory.ENTRY_POINT,
        name="SIP Trunk",
        template_id=81,
        template_class="ModSipTrunk",
        inputs_allowed=False,
        config_model=cfg.SipTrunkData,
    ),
    NodeDefinition(
        type=NodeType.INBOUND_MESSAGE,
        category=NodeCategory.ENTRY_POINT,
        name="Inbound Message",
        template_id=93,
        template_class="ModInboundMessage",
        inputs_allowed=False,
        config_model=cfg.InboundMessageData,
    ),
    NodeDefinition(
        type=NodeType.DIGITAL,
        category=NodeCategory.ENTRY_POINT,
        name="Digital",
        template_id=140,
        template_class="ModStartDigital",
        inputs_allowed=False,
        config_model=cfg.DigitalData,
    ),
    NodeDefinition(
        type=NodeType.FROM_POLICY,
        category=NodeCategory.ENTRY_POINT,
        name="From Policy",
        template_id=2,
        template_class="ModFromPolicy",
        inputs_allowed=False,
        config_model=cfg.PolicyLinkData,
    ),
    NodeDefinition(
        type=NodeType.INVOKABLE_DESTINATION,
        category=NodeCategory.ENTRY_POINT,
        name="Invokable Destination",
        template_id=3100000,
        template_class="ModInvokableDestination",
        inputs_allowed=False,
        config_model=cfg.InvokableDestinationData,
    ),
]


# =============================================================================
# Child Items
# =============================================================================

CHILD_ITEMS = [
    ChildItemDefinition(
        type=ChildItemType.SPEAK,
        name="Speak",
        template_class="ModAction_Say",
        config_model=cfg.SpeakConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.CALL_QUEUE,
        name="Call Queue",
        template_class="ModCallQueue",
        config_model=cfg.CallQueueConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.HUNT_GROUP,
        name="Hunt Group",
        template_class="ModHuntGroup",
        config_model=cfg.HuntGroupConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.VOICEMAIL,
        name="Voicemail",
        template_class="ModVoicemail",
        config_model=cfg.VoicemailConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.RULE,
        name="Rule",
        template_class="ModRule",
        config_model=cfg.RuleConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.CONNECT_CALL,
        name="Connect Call",
        template_id=118,
        template_class="ModConnect",
        template_class_aliases=("ModConnect_FollowMe", "ModConnect_Queue"),
        config_model=cfg.ConnectCallConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.RECORD_CALL,
        name="Record Call",
        template_class="ModAction_Record",
        template_class_aliases=("ModAction_RecordAnalyse",),
        config_model=cfg.RecordCallConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.NOTIFY,
        name="Notify",
        template_class="ModAction_Notify",
        config_model=cfg.NotifyConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.SWITCH_ITEM,
        name="Switch",
        template_class="ModSwitchItem",
        config_model=cfg.SwitchItemConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.GET_INFO,
        name="Get Info",
        template_class="ModGetInfo",
        config_model=cfg.GetInfoConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.ROUTE,
        name="Route",
        template_class="ModRoute",
        config_model=cfg.RouteConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.RETRY,
        name="Retry",
        template_class="ModRetry",
        config_model=cfg.RetryConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.AI_AGENT,
        name="AI Agent",
        template_class="ModAiAgent",
        config_model=cfg.AiAgentConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.AI_INSTRUCTION,
        name="AI Instruction",
        template_class="ModAiInstruction",
        config_model=cfg.AiInstructionConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.AI_KNOWLEDGE,
        name="AI Knowledge",
        template_class="ModAiKnowledge",
        config_model=cfg.AiKnowledgeConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.EVENT,
        name="Event",
        template_class="ModEvent",
        event_trigger=True,
        config_model=cfg.EventConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.QUERY_OBJECT,
        name="Query Object",
        template_class="ModConnector_SFQuery",
        config_model=cfg.QueryObjectConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.CREATE_RECORD,
        name="Create Record",
        template_class="ModCreateRecord",
        config_model=cfg.CreateRecordConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.MANAGE_PROPERTIES,
        name="Manage Properties",
        template_class="ModManageProperties",
        config_model=cfg.ManagePropertiesConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.REQUEST_SKILL,
        name="Request Skill",
        template_class="ModAction_RequestSkills",
        config_model=cfg.RequestSkillConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.SEND_MESSAGE,
        name="Send Message",
        template_class="ModSendMessage",
        config_model=cfg.SendMessageConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.SEND_TEMPLATE,
        name="Send Template",
        template_class="ModSendTemplate",
        config_model=cfg.SendTemplateConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.OMNI_CHANNEL_ROUTE,
        name="Omni-Channel Route",
        template_class="ModOmniChannelRoute",
        config_model=cfg.OmniChannelRouteConfig,
    ),
    ChildItemDefinition(
        type=ChildItemType.DEBUG,
        name="Debug",
        template_class="ModDevelop_Script",
        config_model=cfg.DebugConfig,
    ),
]


# =============================================================================
# All Nodes Combined
# =============================================================================

ALL_NODES = CONTAINER_NODES + ENTRY_POINT_NODES
