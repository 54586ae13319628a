from shellff.unlock.service import UnlockCodeService

__all__ = ["UnlockCodeService"]
