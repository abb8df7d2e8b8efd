# halrest to json encoding

import datetime
import decimal
from uuid import UUID
from flask.json.provider import DefaultJSONProvider
import halrest
from .config import is_debug
from .document import Document


class HALJSONProvider(DefaultJSONProvider):
    """
    Flask JSON encoding for documents and the column types returned by the sources
    """

    mimetype = "application/hal+json"
    # keep the order of the properties and the links
    sort_keys = False

    # pylint: disable=too-many-return-statements,arguments-differ,method-hidden
    def default(self, obj, **kwargs):
        """
        override the default json encoding
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        if isinstance(obj, Document):
            return obj.to_dict()
        if isinstance(obj, datetime.timedelta):
            return str(obj)
        if isinstance(obj, datetime.datetime):
            return obj.isoformat(" ")
        if isinstance(obj, (datetime.date, datetime.time)):
            return obj.isoformat()
        if isinstance(obj, set):
            return list(obj)
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, decimal.Decimal):
            return float(obj)
        if isinstance(obj, bytes):
            if obj == b"":
                return ""
            halrest.log.debug("HALJSONEncoder: serializing bytes obj")
            return obj.hex()

        halrest.log.warning(f'JSON Encoding Error: Unknown object type "{type(obj)}" for {obj}')
        if is_debug():
            return str(obj)
        return {"error": "HALJSONEncoder invalid object"}

