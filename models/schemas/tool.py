from marshmallow import Schema, fields, pre_load, validate, EXCLUDE

from models.tool import TOOL_CATEGORIES, TOOL_TAGS


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class LinksSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    telegram = fields.String(load_default="")
    x = fields.String(load_default="")
    website = fields.String(load_default="")

    @pre_load
    def trim(self, data, **kwargs):
        if isinstance(data, dict):
            data = {k: _strip(v) for k, v in data.items()}
        return data


class ToolCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(
        required=True,
        validate=validate.Length(min=1, error="Tool name is required and must be a non-empty string."),
    )
    logo = fields.String(
        required=True,
        validate=validate.Length(min=1, error="Tool logo is required and must be a non-empty string."),
    )
    category = fields.List(
        fields.String(validate=validate.OneOf(TOOL_CATEGORIES, error="The category is invalid.")),
        required=True,
        validate=validate.Length(min=1, error="At least one category is required."),
    )
    short_description = fields.String(
        load_default="",
        validate=validate.Length(max=500, error="The short description cannot exceed 500 characters."),
    )
    full_detail = fields.String(
        load_default="",
        validate=validate.Length(max=5000, error="The full detail cannot exceed 5000 characters."),
    )
    tool_images = fields.List(
        fields.String(validate=validate.Length(min=1)),
        load_default=list,
        validate=validate.Length(max=5, error="Maximum 5 images are allowed."),
    )
    tags = fields.List(
        fields.String(validate=validate.OneOf(TOOL_TAGS, error="The tag is invalid.")),
        load_default=list,
    )
    links = fields.Nested(LinksSchema, load_default=lambda: {"telegram": "", "x": "", "website": ""})

    @pre_load
    def trim(self, data, **kwargs):
        # Strings and string list items are trimmed before validation
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("name", "logo", "short_description", "full_detail"):
            if key in data:
                data[key] = _strip(data[key])
        if isinstance(data.get("tool_images"), list):
            data["tool_images"] = [_strip(img) for img in data["tool_images"]]
        return data


class ToolOutSchema(Schema):
    id = fields.String()
    author_id = fields.String()
    name = fields.String()
    logo = fields.String()
    short_description = fields.String()
    full_detail = fields.String()
    tool_images = fields.List(fields.String())
    category = fields.List(fields.String())
    tags = fields.List(fields.String())
    links = fields.Dict(keys=fields.String(), values=fields.String())
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
