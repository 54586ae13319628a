from shellff.db.repo.redemption_logs_repo import RedemptionLogsRepo
from shellff.db.repo.release_access_repo import ReleaseAccessRepo
from shellff.db.repo.releases_repo import ReleasesRepo
from shellff.db.repo.unlock_codes_repo import UnlockCodesRepo
from shellff.db.repo.users_repo import UsersRepo

__all__ = [
    "RedemptionLogsRepo",
    "ReleaseAccessRepo",
    "ReleasesRepo",
    "UnlockCodesRepo",
    "UsersRepo",
]
