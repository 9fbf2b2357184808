import enum


class EducationLevel(str, enum.Enum):
    O_LEVEL = "O_LEVEL"
    A_LEVEL = "A_LEVEL"

    @classmethod
    def parse(cls, value):
        """Return the member for ``value`` or None when it is not a known level."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


class SubjectLevel(str, enum.Enum):
    # Subjects may be offered on both tracks
    O_LEVEL = "O_LEVEL"
    A_LEVEL = "A_LEVEL"
    BOTH = "BOTH"


class SubjectType(str, enum.Enum):
    CORE = "CORE"
    OPTIONAL = "OPTIONAL"


class AssignmentStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
