"""
Structured logging for template synthesis.

Writes one JSON object per line with a consistent shape across all stacks:

    {"timestamp": "...Z", "stackId": "keycloak-from-new-vpc", "event": "parameter_declared", ...}

Entries go to stderr. ``cdk synth`` prints the synthesized template on stdout,
which must stay parseable.
"""

import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict


# Field names whose values are never written to the log
SENSITIVE_FIELDS = {
    'password',
    'secret',
    'token',
    'credentials',
    'privatekey',
    'private_key',
    'javaopts',
    'java_opts',
}


class SynthLogger:
    """
    Structured logger scoped to one stack.

    Usage:
        logger = SynthLogger(stack_id='keycloak-from-new-vpc')
        logger.log_stack_start(description='(SO8021) - Deploy keycloak ...')
        logger.log_parameter_declared('CertificateArn', 'String')
        logger.log_settings_resolved(network='new vpc', database='rds mysql')
    """

    def __init__(self, stack_id: str, stream=None):
        self.stack_id = stack_id
        self.stream = stream

    def _sanitize_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Replace the values of sensitive fields, recursing into dicts and lists."""
        if not isinstance(data, dict):
            return data

        sanitized = {}
        for key, value in data.items():
            if key.lower() in SENSITIVE_FIELDS:
                sanitized[key] = '[REDACTED]'
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_data(value)
            elif isinstance(value, list):
                sanitized[key] = [
                    self._sanitize_data(item) if isinstance(item, dict) else item
                    for item in value
                ]
            else:
                sanitized[key] = value

        return sanitized

    def _log(self, event: str, **kwargs: Any) -> None:
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'stackId': self.stack_id,
            'event': event,
            **self._sanitize_data(kwargs),
        }
        print(json.dumps(log_entry, default=str), file=self.stream or sys.stderr)

    def log_stack_start(self, description: str, **additional_fields: Any) -> None:
        self._log('stack_start', description=description, **additional_fields)

    def log_parameter_declared(
        self,
        parameter_id: str,
        parameter_type: str,
        **additional_fields: Any
    ) -> None:
        self._log(
            'parameter_declared',
            parameterId=parameter_id,
            parameterType=parameter_type,
            **additional_fields
        )

    def log_group_registered(self, label: str, parameter_ids: list) -> None:
        self._log('parameter_group_registered', label=label, parameterIds=parameter_ids)

    def log_settings_resolved(self, **additional_fields: Any) -> None:
        """
        Log the resolved deployment settings.

        Only mode-level facts are logged; parameter values are unresolved
        tokens at this point and carry no information.
        """
        self._log('settings_resolved', **additional_fields)

    def log_configuration_error(
        self,
        error_code: str,
        error_message: str,
        **additional_fields: Any
    ) -> None:
        self._log(
            'configuration_error',
            errorCode=error_code,
            errorMessage=error_message,
            **additional_fields
        )

    def log_info(self, message: str, **additional_fields: Any) -> None:
        self._log('info', message=message, **additional_fields)
