"""A minimal schema language for coercing and validating configuration.

Every schema object has a ``coerce(value, path)`` method which returns the
coerced value or raises :exc:`SchemaError`. ``path`` is a list of path
elements used to point at the failing value in error messages, eg.
``["networks", "[0]", ".", "pod-network"]``.
"""


class SchemaError(Exception):

    def __init__(self, path, message):
        self.path = path
        self.message = message

    def __str__(self):
        path = "".join(self.path)
        if not path:
            return self.message
        return "%s: %s" % (path, self.message)


class SchemaExpectationError(SchemaError):

    def __init__(self, path, expected, got):
        self.expected = expected
        self.got = got
        message = "expected %s, got %s" % (expected, got)
        super(SchemaExpectationError, self).__init__(path, message)


class Constant(object):

    def __init__(self, value):
        self.value = value

    def coerce(self, value, path):
        if value != self.value:
            raise SchemaExpectationError(path, repr(self.value), repr(value))
        return value


class OneOf(object):
    """Accept the first schema which coerces the value."""

    def __init__(self, *schemas):
        self.schemas = schemas

    def coerce(self, value, path):
        first_error = None
        for schema in self.schemas:
            try:
                return schema.coerce(value, path)
            except SchemaError as error:
                if first_error is None:
                    first_error = error
        # When no values are supported, raise the first error.
        raise first_error


class Bool(object):

    def coerce(self, value, path):
        if not isinstance(value, bool):
            raise SchemaExpectationError(path, "bool", repr(value))
        return value


class Int(object):

    def coerce(self, value, path):
        if isinstance(value, bool) or not isinstance(value, int):
            raise SchemaExpectationError(path, "int", repr(value))
        return value


class String(object):

    def coerce(self, value, path):
        if not isinstance(value, str):
            raise SchemaExpectationError(path, "string", repr(value))
        return value


class List(object):

    def __init__(self, schema):
        self.schema = schema

    def coerce(self, value, path):
        if not isinstance(value, list):
            raise SchemaExpectationError(path, "list", repr(value))
        new_list = []
        for index, item in enumerate(value):
            new_list.append(self.schema.coerce(item, path + ["[%d]" % index]))
        return new_list


def _key_path(path, key):
    if not path:
        return [str(key)]
    return path + [".", str(key)]


class Dict(object):

    def __init__(self, key_schema, value_schema):
        self.key_schema = key_schema
        self.value_schema = value_schema

    def coerce(self, value, path):
        if not isinstance(value, dict):
            raise SchemaExpectationError(path, "dict", repr(value))
        new_dict = {}
        for key, item in value.items():
            new_key = self.key_schema.coerce(key, path)
            new_dict[new_key] = self.value_schema.coerce(
                item, _key_path(path, key))
        return new_dict


class KeyDict(object):
    """A dict with a fixed set of known keys.

    Unknown keys are left untouched. Keys listed in ``optional`` may be
    absent; all the others are required.
    """

    def __init__(self, schema, optional=None):
        self.schema = schema
        self.optional = set(optional or ())

    def coerce(self, value, path):
        if not isinstance(value, dict):
            raise SchemaExpectationError(path, "dict", repr(value))
        new_dict = dict(value)
        for key, schema in self.schema.items():
            if key not in value:
                if key in self.optional:
                    continue
                raise SchemaError(
                    _key_path(path, key), "required value not found")
            new_dict[key] = schema.coerce(value[key], _key_path(path, key))
        return new_dict
