"""Constructor argument encoding for deploy-verify library."""

from typing import Any, Dict, List, Sequence

from eth_abi import encode
from eth_abi.exceptions import EncodingError

from .exceptions import ConstructorArgMismatch
from .types import ContractArtifact


def encode_constructor_args(artifact: ContractArtifact, args: Sequence[Any]) -> bytes:
    """
    ABI-encode constructor arguments for a contract artifact.

    Pure and deterministic: the same artifact and arguments always give the
    same bytes. The result is computed once per deployment and used both in
    the deployment transaction and in the verification request.

    Args:
        artifact: Resolved contract artifact (only its ABI is used)
        args: Constructor argument values, in declaration order

    Returns:
        Encoded arguments (empty for a constructor without inputs)

    Raises:
        ConstructorArgMismatch: If the arity or any value does not fit the ABI
    """
    types = artifact.constructor_types()
    if len(args) != len(types):
        raise ConstructorArgMismatch(
            f"{artifact.name} constructor takes {len(types)} argument(s) "
            f"({', '.join(types) or 'none'}), got {len(args)}"
        )
    if not types:
        return b""

    try:
        return encode(types, list(args))
    except (EncodingError, TypeError, ValueError, OverflowError) as e:
        raise ConstructorArgMismatch(
            f"{artifact.name} constructor arguments do not match ({', '.join(types)}): {e}"
        ) from e


def describe_constructor(abi: List[Dict[str, Any]]) -> str:
    """Render the constructor signature, e.g. "constructor(address _erc20, uint256 _rewardPerBlock)"."""
    for item in abi:
        if item.get("type") == "constructor":
            params = ", ".join(
                f"{arg['type']} {arg.get('name', '')}".strip() for arg in item.get("inputs", [])
            )
            return f"constructor({params})"
    return "constructor()"
