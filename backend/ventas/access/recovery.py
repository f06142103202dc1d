# Overview: Generic recovery screen shown when a screen fails to render.

from dataclasses import dataclass


@dataclass(frozen=True)
class RecoveryAction:
    id: str
    label: str

    def to_dict(self) -> dict:
        return {"id": self.id, "label": self.label}


RELOAD = RecoveryAction("reload", "Recargar página")
CONTINUE = RecoveryAction("continue", "Intentar continuar")


@dataclass(frozen=True)
class RecoveryScreen:
    """
    Fallback content for an unexpected failure.

    reload restarts the application; continue dismisses the error and
    returns to the previous screen.
    """
    code: str = "UNEXPECTED_ERROR"
    title: str = "Algo salió mal"
    message: str = "Ocurrió un error inesperado. Puedes recargar la página o intentar continuar."
    actions: tuple[RecoveryAction, ...] = (RELOAD, CONTINUE)

    @property
    def action_ids(self) -> tuple[str, ...]:
        return tuple(action.id for action in self.actions)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "title": self.title,
            "message": self.message,
            "actions": [action.to_dict() for action in self.actions],
        }


RECOVERY_SCREEN = RecoveryScreen()
