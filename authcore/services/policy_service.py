# authcore/services/policy_service.py
"""Password policy validation
Checks every rule independently so all violations are reported at once
"""
import re
from typing import Dict, List, NamedTuple

from authcore.config import PasswordPolicy

SPECIAL_CHARS = re.compile(r"""[!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?`~]""")


class Violation(NamedTuple):
    code: str
    message: str


class ValidationResult(NamedTuple):
    valid: bool
    violations: List[Violation]
    requirements: Dict[str, bool]


REUSED_PASSWORD = Violation(
    'history',
    'Password was used recently and cannot be reused'
)


def validate_password(password: str, policy: PasswordPolicy) -> ValidationResult:
    """
    Validate a candidate password against the policy

    Args:
        password: Candidate plain text password
        policy: Policy in effect for this call

    Returns:
        ValidationResult with every violated rule, plus a per-rule
        requirements map (True when met or not required) for live UI checks
    """
    lowered = password.lower()
    requirements = {
        'min_length': len(password) >= policy.min_length,
        'uppercase': not policy.require_uppercase or bool(re.search(r'[A-Z]', password)),
        'lowercase': not policy.require_lowercase or bool(re.search(r'[a-z]', password)),
        'number': not policy.require_numbers or bool(re.search(r'\d', password)),
        'special_char': not policy.require_special_chars or bool(SPECIAL_CHARS.search(password)),
        'dictionary': not any(word and word.lower() in lowered for word in policy.dictionary_words),
    }
    messages = {
        'min_length': f'Password must be at least {policy.min_length} characters long',
        'uppercase': 'Password must contain at least one uppercase letter',
        'lowercase': 'Password must contain at least one lowercase letter',
        'number': 'Password must contain at least one number',
        'special_char': 'Password must contain at least one special character',
        'dictionary': 'Password contains a common word that is not allowed',
    }

    violations = [Violation(code, messages[code]) for code, met in requirements.items() if not met]
    return ValidationResult(not violations, violations, requirements)
