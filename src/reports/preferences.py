"""Per-user report preferences kept in the users table."""

import os
from datetime import datetime
import logging

from shared.dynamodb import DynamoDBClient
from shared.validators import VALID_EXPORT_FORMATS, validate_export_format

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_FORMAT = 'csv'
EXPORT_FORMAT_ATTRIBUTE = 'preferred_export_format'


class PreferenceStore:
    """Remembers the last export format a user picked."""

    def __init__(self):
        """Initialize preference store."""
        self.users_table = DynamoDBClient(os.environ.get('USERS_TABLE'))

    def get_export_format(self, user_id: str) -> str:
        """
        Read the user's preferred export format.

        Unknown or missing values fall back to CSV.
        """
        user = self.users_table.get_item({'user_id': user_id}) or {}
        stored = user.get(EXPORT_FORMAT_ATTRIBUTE)

        if stored not in VALID_EXPORT_FORMATS:
            return DEFAULT_EXPORT_FORMAT
        return stored

    def set_export_format(self, user_id: str, export_format: str) -> str:
        """Persist the user's preferred export format."""
        export_format = validate_export_format(export_format)

        self.users_table.update_item(
            key={'user_id': user_id},
            update_expression="SET #fmt = :fmt, #updated_at = :updated_at",
            expression_values={
                ':fmt': export_format,
                ':updated_at': datetime.utcnow().isoformat()
            },
            expression_names={
                '#fmt': EXPORT_FORMAT_ATTRIBUTE,
                '#updated_at': 'preferences_updated_at'
            }
        )

        logger.info(f"Saved preferred export format {export_format} for user {user_id}")
        return export_format
