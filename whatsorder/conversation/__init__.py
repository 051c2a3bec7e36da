from whatsorder.conversation.dialogue_gate import DialogueGate, GateState, resolve_gate_state
from whatsorder.conversation.intent_resolver import IntentResolver, IntentRule
from whatsorder.conversation.suggestions import generate_suggestions

__all__ = [
    "IntentResolver",
    "IntentRule",
    "DialogueGate",
    "GateState",
    "resolve_gate_state",
    "generate_suggestions",
]
