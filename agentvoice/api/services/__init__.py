from .artifact_store import ArtifactStore, StoredArtifact
from .pipeline import AgentPipeline, AgentReply
from .rpc_client import AgentRuntimeClient

__all__ = ["AgentPipeline", "AgentReply", "AgentRuntimeClient", "ArtifactStore", "StoredArtifact"]
