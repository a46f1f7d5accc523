# voice_intake/intake/stages.py
from enum import Enum, IntEnum


class IntakeStep(IntEnum):
    PATIENT_INFO = 1
    VOICE_INPUT = 2
    CONFIRM = 3
    SUBMITTED = 4
    CLINICIAN_VIEW = 5


class InputMethod(str, Enum):
    SPEECH = "speech"
    UPLOAD = "upload"
    MANUAL = "manual"


class VisitType(str, Enum):
    FIRST = "first"
    RETURN = "return"
    FORGOT = "forgot"  # forgot the consultation card number


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
