from .id_factory import current_millis, import_batch_id, member_id, self_member_id

__all__ = [
    "current_millis",
    "import_batch_id",
    "member_id",
    "self_member_id",
]
