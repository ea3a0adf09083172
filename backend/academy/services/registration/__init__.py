from academy.services.registration.dto import UserRegistrationIn, UserRegistrationOut
from academy.services.registration.service import UserRegistrationService

__all__ = ["UserRegistrationIn", "UserRegistrationOut", "UserRegistrationService"]
