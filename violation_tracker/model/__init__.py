from violation_tracker.model.users import User, UserRole
from violation_tracker.model.students import Student
from violation_tracker.model.violations import Violation

__all__ = ["User", "UserRole", "Student", "Violation"]
