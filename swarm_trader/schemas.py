"""
Pydantic schemas for the agent pipeline.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class AgentRole(str, Enum):
    SCANNER = "scanner"
    EVALUATOR = "evaluator"
    UNSPECIFIED = "unspecified"


class Agent(BaseModel):
    """External decision participant, loaded from an agent descriptor file."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1)
    tag: str = Field(default="", validation_alias=AliasChoices("tag", "role"))
    endpoint: str
    wallet_address: str = Field(
        default="",
        validation_alias=AliasChoices("wallet_address", "walletAddress"),
    )

    @field_validator("endpoint")
    @classmethod
    def check_endpoint(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"endpoint must be an http(s) URL, got {v!r}")
        return v

    @property
    def role(self) -> AgentRole:
        try:
            return AgentRole(self.tag.strip().lower())
        except ValueError:
            return AgentRole.UNSPECIFIED


class Candidate(BaseModel):
    """Token proposed by the scanner agent; lives for one pass."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    address: str = Field(..., min_length=1)
    chain_id: int = Field(validation_alias=AliasChoices("chain_id", "chainId", "networkId"))
    symbol: str = Field(..., min_length=1)
    name: str = ""
    decimals: int = 18
    rank: Optional[float] = None

    @property
    def key(self) -> str:
        """Identity of the candidate within and across passes."""
        return f"{self.chain_id}:{self.address.lower()}"


class ReplyOutcome(str, Enum):
    OK = "ok"
    FAILED = "failed"


class AgentReply(BaseModel):
    """Outcome of sending one message to one agent."""
    agent_name: str
    outcome: ReplyOutcome
    payload: Any = None
    error: Optional[str] = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.outcome == ReplyOutcome.OK

    @classmethod
    def success(cls, agent_name: str, payload: Any, duration_ms: float = 0.0) -> "AgentReply":
        return cls(agent_name=agent_name, outcome=ReplyOutcome.OK, payload=payload, duration_ms=duration_ms)

    @classmethod
    def failure(cls, agent_name: str, error: str, duration_ms: float = 0.0) -> "AgentReply":
        return cls(agent_name=agent_name, outcome=ReplyOutcome.FAILED, error=error, duration_ms=duration_ms)


class Vote(str, Enum):
    YES = "yes"
    NO = "no"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def parse(cls, raw: Any) -> "Vote":
        """Case-insensitive parse; anything that is not yes/no is unrecognized."""
        if not isinstance(raw, str):
            return cls.UNRECOGNIZED
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.UNRECOGNIZED


class AgentVote(BaseModel):
    agent_name: str
    vote: Vote
    failed: bool = False
    reasoning: Optional[str] = None
    error: Optional[str] = None


class Tally(BaseModel):
    """Aggregated evaluator outcome for one candidate."""
    approvals: int = 0
    total: int = 0
    votes: List[AgentVote] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_bounds(self) -> "Tally":
        if self.approvals < 0 or self.approvals > self.total:
            raise ValueError(f"approvals ({self.approvals}) must be within 0..total ({self.total})")
        return self


class Quote(BaseModel):
    """Swap route from the quote service."""
    router_address: str
    call_data: str
    quoted_amount: str
    min_received_amount: str
    quoted_decimals: Optional[int] = None
    value: str = "0"


class TradeStage(str, Enum):
    QUOTE = "quote"
    EXECUTE = "execute"
    SHADOW = "shadow"


class TradeResult(BaseModel):
    """Result of one trade attempt for an approved candidate."""
    success: bool
    stage: TradeStage
    tx_hash: Optional[str] = None
    error: Optional[str] = None
    quote: Optional[Quote] = None


class TradeStatus(str, Enum):
    SKIPPED = "skipped"
    EXECUTED = "executed"
    FAILED = "failed"
    SHADOW = "shadow"


class TradeDecision(BaseModel):
    """Gate verdict for one candidate within one pass."""
    pass_id: str
    candidate_key: str
    symbol: str
    approved: bool
    approvals: int
    total: int
    quorum: int
    status: TradeStatus = TradeStatus.SKIPPED
    tx_hash: Optional[str] = None
    error: Optional[str] = None
    decided_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class WalletDescriptor(BaseModel):
    """Executor wallet persisted by the wallet-creation command."""
    model_config = ConfigDict(populate_by_name=True)

    wallet_id: str = Field(alias="walletId")
    wallet_address: str = Field(alias="walletAddress")


class CandidateOutcome(BaseModel):
    candidate: Candidate
    tally: Tally
    decision: TradeDecision


class PassResult(BaseModel):
    """Complete audit record of one pipeline pass."""
    pass_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    mode: str
    scanner: str
    request: Optional[str] = None
    candidates: List[Candidate] = Field(default_factory=list)
    outcomes: List[CandidateOutcome] = Field(default_factory=list)
    skipped_candidates: List[str] = Field(default_factory=list)
    aborted: bool = False
    errors: List[str] = Field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def trades_attempted(self) -> int:
        return sum(
            1 for o in self.outcomes
            if o.decision.status in (TradeStatus.EXECUTED, TradeStatus.FAILED)
        )
