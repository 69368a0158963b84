from casework.models.cases import Appointment, Case, CaseAssignment, Task
from casework.models.security import Office, User

__all__ = ["Appointment", "Case", "CaseAssignment", "Office", "Task", "User"]
