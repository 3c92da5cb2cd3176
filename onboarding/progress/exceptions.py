"""Training errors raised by gating, quiz sessions and the progress gateway."""


class TrainingError(Exception):
    """Base training error."""

    def __init__(self, message: str, code: str = "training_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class ConfigurationError(TrainingError):
    """Module has no quiz questions and cannot be completed."""

    def __init__(self, message: str = "This module has no quiz configured"):
        super().__init__(message, "module_not_configured")


class ModuleLockedError(TrainingError):
    """Previous module in the curriculum has not been passed."""

    def __init__(
        self, message: str = "Pass the previous module to unlock this one"
    ):
        super().__init__(message, "module_locked")


class QuizNotAccessibleError(TrainingError):
    """Quiz requested before the video or during a strike-out."""

    def __init__(self, message: str = "Quiz is not available"):
        super().__init__(message, "quiz_not_accessible")


class NoActiveQuizError(TrainingError):
    """Learner has no quiz in progress."""

    def __init__(self, message: str = "No quiz in progress"):
        super().__init__(message, "no_active_quiz")


class QuizAlreadyFinishedError(TrainingError):
    """Answer submitted to a finished quiz."""

    def __init__(self, message: str = "Quiz already finished"):
        super().__init__(message, "quiz_finished")


class InvalidAnswerError(TrainingError):
    """Selected option does not exist for the current question."""

    def __init__(self, message: str = "Selected option does not exist"):
        super().__init__(message, "invalid_answer")


class GatewayReadFailure(TrainingError):
    """Progress could not be read. Never to be confused with 'no progress'."""

    def __init__(self, message: str = "Progress could not be loaded"):
        super().__init__(message, "gateway_read_failure")


class GatewayWriteFailure(TrainingError):
    """Progress could not be saved."""

    def __init__(self, message: str = "Progress could not be saved"):
        super().__init__(message, "gateway_write_failure")


class QuizSessionUnavailableError(TrainingError):
    """Active quiz sessions could not be loaded or stored."""

    def __init__(self, message: str = "Quiz session storage is unavailable"):
        super().__init__(message, "quiz_session_unavailable")
