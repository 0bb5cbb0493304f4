# =============================================================================
# Storage Proofs and Attestation
# =============================================================================
# Simulated storage attestation and the attestation authority seam.
# =============================================================================

"""Storage proof generation and the attestation authority interface."""

from typing import Optional, Protocol

from trust_ledger.hashing import content_hash, random_id
from trust_ledger.models import LedgerSettings, StorageProof

__all__ = [
    "AttestationAuthority",
    "SimulatedAttestationAuthority",
    "StorageProofGenerator",
]


class AttestationAuthority(Protocol):
    """External authority that registers a dataset and returns a proof reference."""

    def register(self, dataset_id: int, file_hash: str) -> str:
        ...


class SimulatedAttestationAuthority:
    """Stand-in for the blockchain registration call. Returns a fake tx hash."""

    def register(self, dataset_id: int, file_hash: str) -> str:
        return f"0x{random_id(32)}"


class StorageProofGenerator:
    """
    Builds simulated storage proofs.

    Each call is independent: a fresh proof id and node list every time, so
    two proofs for the same dataset differ but are both valid.
    """

    NODE_SUFFIX_BYTES = 4
    PROOF_ID_BYTES = 16

    def __init__(self, settings: Optional[LedgerSettings] = None) -> None:
        self.settings = settings or LedgerSettings()

    def storage_nodes(self) -> list[str]:
        return [
            f"dh://{seed}-{random_id(self.NODE_SUFFIX_BYTES)}.testnet"
            for seed in self.settings.storage_node_seeds
        ]

    @staticmethod
    def attestation_digest(file_hash: str, storage_nodes: list[str]) -> str:
        """Single SHA-256 over the file hash followed by the node ids."""
        return content_hash(file_hash + "".join(storage_nodes))

    def generate(self, dataset_id: int, file_hash: str) -> StorageProof:
        nodes = self.storage_nodes()
        return StorageProof(
            proof_id=random_id(self.PROOF_ID_BYTES),
            dataset_id=dataset_id,
            storage_nodes=nodes,
            attestation_digest=self.attestation_digest(file_hash, nodes),
            network=self.settings.network,
            verified=True,
        )
