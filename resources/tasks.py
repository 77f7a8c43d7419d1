"""Task mutations that are only available as sync commands"""

from sync import SyncClient, SyncCommand


async def complete_task_forever(client: SyncClient, task_id: str) -> None:
    """Complete a task, ending its recurrence instead of rescheduling it"""
    await client.execute([SyncCommand("item_complete", {"id": task_id})])
