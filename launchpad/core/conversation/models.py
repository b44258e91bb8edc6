"""
Conversation models.

Menu actions, the closed set of input-collecting flows with their ordered
steps, the typed forms those steps fill, and the per-user Session.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type


class Action(str, Enum):
    """Menu entries; values double as Telegram callback data."""
    CONTRACT_INFO = "contract_info"
    TOKEN_INFO = "token_info"
    CALCULATE_BUY = "calculate_buy"
    CREATE_TOKEN = "create_token"
    BUY_TOKENS = "buy_tokens"
    CLAIM_FEES = "claim_fees"
    SET_FEE = "set_fee"
    WALLET_SETUP = "wallet_setup"
    DEBUG_BUY = "debug_buy"
    HELP = "help"

    @property
    def label(self) -> str:
        return MENU_LABELS[self]

    @classmethod
    def parse(cls, text: Any) -> Optional["Action"]:
        """Resolve a callback value, ``/command``, menu number or label."""
        if isinstance(text, Action):
            return text
        if text is None:
            return None
        key = str(text).strip()
        if not key:
            return None
        if key.isdigit():
            index = int(key) - 1
            return MENU_ORDER[index] if 0 <= index < len(MENU_ORDER) else None

        key = key.lstrip("/").lower()
        for action in cls:
            if key == action.value or key == action.label.lower():
                return action
        return None


MENU_LABELS: Dict[Action, str] = {
    Action.CONTRACT_INFO: "📊 Contract Info",
    Action.TOKEN_INFO: "🔍 Token Info",
    Action.CALCULATE_BUY: "💰 Calculate Buy",
    Action.CREATE_TOKEN: "🚀 Create Token Sale",
    Action.BUY_TOKENS: "🛒 Buy Tokens",
    Action.CLAIM_FEES: "💎 Claim Fees",
    Action.SET_FEE: "⚙️ Set Fee %",
    Action.WALLET_SETUP: "🔧 Wallet Setup",
    Action.DEBUG_BUY: "🩺 Debug Buy",
    Action.HELP: "❓ Help",
}

MENU_ORDER: List[Action] = list(MENU_LABELS)


class Flow(str, Enum):
    TOKEN_INFO = "token_info"
    QUOTE = "quote"
    CREATE_SALE = "create_sale"
    BUY = "buy"
    SET_FEE = "set_fee"
    DEBUG_BUY = "debug_buy"


class Step(str, Enum):
    """Names the next input a session expects."""
    TOKEN_ADDRESS = "token_address"
    AMOUNT = "amount"
    NAME = "name"
    SYMBOL = "symbol"
    DECIMALS = "decimals"
    FUNDING_GOAL = "funding_goal"
    INITIAL_SUPPLY = "initial_supply"
    FUNDING_SUPPLY = "funding_supply"
    FEE_BASIS_POINTS = "fee_basis_points"


class InputKind(str, Enum):
    TEXT = "text"          # any non-empty text
    AMOUNT = "amount"      # decimal within the fixed-point scale
    INTEGER = "integer"    # whole number
    DECIMALS = "decimals"  # optional integer 0..255


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------

@dataclass
class TokenLookupForm:
    token: Optional[str] = None


@dataclass
class QuoteForm:
    token: Optional[str] = None
    amount: Optional[str] = None


@dataclass
class CreateSaleForm:
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None
    funding_goal: Optional[str] = None
    initial_supply: Optional[str] = None
    funding_supply: Optional[str] = None


@dataclass
class BuyForm:
    token: Optional[str] = None
    amount: Optional[str] = None


@dataclass
class SetFeeForm:
    basis_points: Optional[int] = None


@dataclass
class DebugBuyForm:
    token: Optional[str] = None
    amount: Optional[str] = None


@dataclass(frozen=True)
class StepSpec:
    step: Step
    kind: InputKind
    field: str
    prompt: str
    invalid: str


@dataclass(frozen=True)
class FlowSpec:
    flow: Flow
    action: Action
    form: Type
    steps: Tuple[StepSpec, ...]

    def index_of(self, step: Step) -> int:
        for i, entry in enumerate(self.steps):
            if entry.step == step:
                return i
        raise KeyError(step)


def _amount_step(prompt: str, invalid: str = "Please enter a valid number for WSOL amount") -> StepSpec:
    return StepSpec(Step.AMOUNT, InputKind.AMOUNT, "amount", prompt, invalid)


FLOWS: Dict[Flow, FlowSpec] = {
    Flow.TOKEN_INFO: FlowSpec(
        Flow.TOKEN_INFO,
        Action.TOKEN_INFO,
        TokenLookupForm,
        (
            StepSpec(Step.TOKEN_ADDRESS, InputKind.TEXT, "token",
                     "🔍 Please enter the token address:", "Token address cannot be empty"),
        ),
    ),
    Flow.QUOTE: FlowSpec(
        Flow.QUOTE,
        Action.CALCULATE_BUY,
        QuoteForm,
        (
            StepSpec(Step.TOKEN_ADDRESS, InputKind.TEXT, "token",
                     "💰 Enter the token address to calculate:", "Token address cannot be empty"),
            _amount_step("Enter WSOL amount:"),
        ),
    ),
    Flow.CREATE_SALE: FlowSpec(
        Flow.CREATE_SALE,
        Action.CREATE_TOKEN,
        CreateSaleForm,
        (
            StepSpec(Step.NAME, InputKind.TEXT, "name",
                     "🚀 Enter token name:", "Token name cannot be empty"),
            StepSpec(Step.SYMBOL, InputKind.TEXT, "symbol",
                     "Enter token symbol:", "Token symbol cannot be empty"),
            StepSpec(Step.DECIMALS, InputKind.DECIMALS, "decimals",
                     "Enter token decimals (default 9, send 'skip' to keep it):",
                     "Decimals must be a whole number between 0 and 255"),
            StepSpec(Step.FUNDING_GOAL, InputKind.AMOUNT, "funding_goal",
                     "Enter funding goal (WSOL):", "Please enter a valid number for funding goal"),
            StepSpec(Step.INITIAL_SUPPLY, InputKind.AMOUNT, "initial_supply",
                     "Enter initial supply:", "Please enter a valid number for initial supply"),
            StepSpec(Step.FUNDING_SUPPLY, InputKind.AMOUNT, "funding_supply",
                     "Enter funding supply:", "Please enter a valid number for funding supply"),
        ),
    ),
    Flow.BUY: FlowSpec(
        Flow.BUY,
        Action.BUY_TOKENS,
        BuyForm,
        (
            StepSpec(Step.TOKEN_ADDRESS, InputKind.TEXT, "token",
                     "🛒 Enter token address:", "Token address cannot be empty"),
            _amount_step("Enter WSOL amount to spend:"),
        ),
    ),
    Flow.SET_FEE: FlowSpec(
        Flow.SET_FEE,
        Action.SET_FEE,
        SetFeeForm,
        (
            StepSpec(Step.FEE_BASIS_POINTS, InputKind.INTEGER, "basis_points",
                     "⚙️ Enter new fee percent (basis points):",
                     "Please enter a whole number for fee basis points"),
        ),
    ),
    Flow.DEBUG_BUY: FlowSpec(
        Flow.DEBUG_BUY,
        Action.DEBUG_BUY,
        DebugBuyForm,
        (
            StepSpec(Step.TOKEN_ADDRESS, InputKind.TEXT, "token",
                     "🩺 Enter token address to debug:", "Token address cannot be empty"),
            _amount_step("Enter WSOL amount to debug:"),
        ),
    ),
}

ACTION_FLOWS: Dict[Action, Flow] = {spec.action: flow for flow, spec in FLOWS.items()}


@dataclass
class Session:
    """One user's in-progress flow."""
    user_id: str
    flow: Flow
    step: Step
    form: Any = None

    @classmethod
    def begin(cls, user_id: str, flow: Flow) -> "Session":
        spec = FLOWS[flow]
        return cls(user_id=user_id, flow=flow, step=spec.steps[0].step, form=spec.form())

    @property
    def spec(self) -> FlowSpec:
        return FLOWS[self.flow]

    @property
    def current(self) -> StepSpec:
        return self.spec.steps[self.spec.index_of(self.step)]

    def store(self, value: Any) -> None:
        setattr(self.form, self.current.field, value)

    def advance(self) -> Optional[StepSpec]:
        """Move to the next step; ``None`` once the flow has all its input."""
        steps = self.spec.steps
        index = self.spec.index_of(self.step)
        if index + 1 >= len(steps):
            return None
        self.step = steps[index + 1].step
        return steps[index + 1]


class MessageKind(str, Enum):
    PROMPT = "prompt"
    REPROMPT = "reprompt"
    PROGRESS = "progress"
    RESULT = "result"
    ERROR = "error"
    INFO = "info"


@dataclass
class OutboundMessage:
    """A message for the front-end; ``menu`` asks it to show the main menu."""
    text: str
    kind: MessageKind = MessageKind.INFO
    markdown: bool = False
    menu: bool = False
