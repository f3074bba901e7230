from fastapi import APIRouter

from hcw_assistant.services.policy.registry import PolicyRegistry

router = APIRouter()


@router.get("")
def health():
    policy = PolicyRegistry.get_or_default()
    return {
        "status": "ok",
        "policy": f"{policy.meta.policy_id} ({policy.meta.version})",
    }
