"""GuardFX Screens - Textual UI screens."""

from guardfx.screens.codes import AuthCodeCard, CodesScreen
from guardfx.screens.manage import ManageScreen
from guardfx.screens.modals import AddAccountModal, ConfirmDeleteModal

__all__ = [
    "CodesScreen",
    "AuthCodeCard",
    "ManageScreen",
    "AddAccountModal",
    "ConfirmDeleteModal",
]
