from marshmallow import Schema, fields, validate, EXCLUDE


class InitiatePushSchema(Schema):
    """STK Push initiation request schema"""

    class Meta:
        unknown = EXCLUDE

    phone = fields.Str(
        required=True,
        validate=validate.Length(min=1),
        error_messages={'required': 'phone required', 'null': 'phone required'}
    )
    # Number or numeric string; the configured default applies when absent
    amount = fields.Raw(required=False, allow_none=True, load_default=None)
    account_reference = fields.Str(data_key='accountRef', required=False, allow_none=True, load_default=None)
