import anyio

from maintgate.maintenance.gate import ReadStateHook, WriteStateHook
from maintgate.schemas import MaintenanceState
from maintgate.store.base import StateStore


def store_hooks(store: StateStore) -> tuple[ReadStateHook, WriteStateHook]:
    """Adapt a blocking store to the gate's async read/write hooks.

    Store I/O runs in a worker thread so a slow store does not stall the event
    loop; the gate still awaits each call before continuing the request.
    """

    async def read_external_state() -> MaintenanceState | None:
        return await anyio.to_thread.run_sync(store.load)

    async def write_external_state(state: MaintenanceState) -> None:
        await anyio.to_thread.run_sync(store.save, state)

    return read_external_state, write_external_state
