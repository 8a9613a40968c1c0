# agentvoice/core/agents.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Tuple

DEFAULT_MODEL = "gemini-2.0-flash-exp"


@dataclass(frozen=True)
class Agent:
    id: str
    name: str
    description: str
    capabilities: Tuple[str, ...]
    model: str
    system_prompt: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["capabilities"] = list(self.capabilities)
        return data


class AgentNotFound(LookupError):
    def __init__(self, agent_id: str):
        super().__init__(f"Agent not found: {agent_id}")
        self.agent_id = agent_id


class AgentRegistry:
    """Immutable id -> Agent table. Iteration order is definition order."""

    def __init__(self, agents: Iterable[Agent]):
        self._agents: Tuple[Agent, ...] = tuple(agents)
        self._by_id: Dict[str, Agent] = {}
        for agent in self._agents:
            if agent.id in self._by_id:
                raise ValueError(f"Duplicate agent id: {agent.id}")
            self._by_id[agent.id] = agent

    def list(self) -> Tuple[Agent, ...]:
        return self._agents

    def find(self, agent_id: str) -> Agent:
        try:
            return self._by_id[agent_id]
        except KeyError:
            raise AgentNotFound(agent_id) from None

    def __len__(self) -> int:
        return len(self._agents)


DEFAULT_AGENTS: Tuple[Agent, ...] = (
    Agent(
        id="agent_001",
        name="General Assistant",
        description="A helpful general-purpose AI assistant powered by Gemini",
        capabilities=("text", "conversation", "reasoning"),
        model=DEFAULT_MODEL,
        system_prompt=(
            "You are a helpful, friendly, and knowledgeable AI assistant. "
            "Provide clear, accurate, and concise responses."
        ),
    ),
    Agent(
        id="agent_002",
        name="Web3 Expert",
        description="Specialized in blockchain, Web3, and cryptocurrency technologies",
        capabilities=("web3", "crypto", "blockchain", "nft"),
        model=DEFAULT_MODEL,
        system_prompt=(
            "You are a Web3 and blockchain expert. Help users understand cryptocurrency, "
            "NFTs, smart contracts, DeFi, and related technologies. Provide accurate "
            "technical information and practical guidance."
        ),
    ),
    Agent(
        id="agent_003",
        name="Voice Specialist",
        description="Optimized for natural voice conversations and audio interactions",
        capabilities=("voice", "audio", "conversation"),
        model=DEFAULT_MODEL,
        system_prompt=(
            "You are an AI assistant optimized for voice interactions. Respond in a natural, "
            "conversational tone suitable for speech. Keep responses concise and easy to "
            "understand when spoken aloud."
        ),
    ),
    Agent(
        id="agent_004",
        name="Code Assistant",
        description="Expert in programming, software development, and technical problem-solving",
        capabilities=("coding", "debugging", "technical"),
        model=DEFAULT_MODEL,
        system_prompt=(
            "You are an expert programming assistant. Help users with code, debugging, "
            "architecture, and technical decisions. Provide clear explanations and working "
            "code examples."
        ),
    ),
)


def default_registry() -> AgentRegistry:
    return AgentRegistry(DEFAULT_AGENTS)
