from shellff.db.models.code_redemption_logs import CodeRedemptionLog
from shellff.db.models.release_access import ReleaseAccess
from shellff.db.models.release_tracks import ReleaseTrack
from shellff.db.models.releases import Release
from shellff.db.models.unlock_code_batches import UnlockCodeBatch
from shellff.db.models.unlock_codes import UnlockCode
from shellff.db.models.users import User

__all__ = [
    "CodeRedemptionLog",
    "Release",
    "ReleaseAccess",
    "ReleaseTrack",
    "UnlockCode",
    "UnlockCodeBatch",
    "User",
]
