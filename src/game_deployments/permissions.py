"""Post-deployment permission wiring between contracts."""

import asyncio
import logging
from typing import Awaitable, Callable, List, Mapping

from .abis import get_abi
from .registry import ContractTypeConfig
from .transactions import TransactionSender
from .types import ContractType, PermissionAction, PermissionContext, PermissionResult

logger = logging.getLogger(__name__)

ActionSender = Callable[[PermissionAction], Awaitable[str]]  # returns tx hash


def collect_permission_actions(
    context: PermissionContext,
    registry: Mapping[ContractType, ContractTypeConfig],
) -> List[PermissionAction]:
    """
    Ask every registered contract type for the actions it needs.

    All types are consulted, not only the ones deployed in this run, since a
    type may need wiring because a different type was just deployed.
    """
    actions: List[PermissionAction] = []
    for config in registry.values():
        actions.extend(config.get_permission_actions(context))
    return actions


async def execute_permissions(
    context: PermissionContext,
    registry: Mapping[ContractType, ContractTypeConfig],
    send_action: ActionSender,
) -> List[PermissionResult]:
    """
    Execute collected permission actions one at a time.

    Actions share one signer, so they are awaited sequentially to keep nonces
    ordered. A failing action is recorded and the remaining ones still run.

    Returns:
        One PermissionResult per action, in execution order
    """
    actions = collect_permission_actions(context, registry)
    if not actions:
        logger.info("No permission actions needed")
        return []

    results: List[PermissionResult] = []
    for action in actions:
        logger.info(action.description)
        try:
            tx_hash = await send_action(action)
        except Exception as e:
            error = str(e) or type(e).__name__
            logger.error("Permission action failed (%s): %s", action.description, error, exc_info=True)
            results.append(PermissionResult(description=action.description, success=False, error=error))
            continue

        logger.info("Permission action succeeded, tx: %s", tx_hash)
        results.append(PermissionResult(description=action.description, success=True, tx_hash=tx_hash))

    return results


def transaction_action_sender(sender: TransactionSender) -> ActionSender:
    """Action sender that signs each action with the controller account."""

    async def send(action: PermissionAction) -> str:
        tx_hash, _ = await asyncio.to_thread(
            sender.write_contract,
            action.target_contract,
            get_abi(action.abi_ref),
            action.function_name,
            action.args,
        )
        return tx_hash

    return send
