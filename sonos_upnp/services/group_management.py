"""
GroupManagement — join and leave groups by member ID (RINCON_xxx).
"""

from .base import Service


class GroupManagement(Service):
    name = "GroupManagement"

    async def add_member(self, member_id: str, boot_seq: int = 0) -> dict:
        return await self.action("AddMember", {
            "MemberID": member_id,
            "BootSeq": boot_seq,
        })

    async def remove_member(self, member_id: str) -> dict:
        return await self.action("RemoveMember", {"MemberID": member_id})
