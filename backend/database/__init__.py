from .driver import Driver, Query, Record
from .errors import DriverError, NotConnectedError, UnsupportedFilterValueError
from .firebase.firestore_driver import FirestoreDriver, FirestoreDriverOptions

__all__ = [
    'Driver',
    'Query',
    'Record',
    'DriverError',
    'NotConnectedError',
    'UnsupportedFilterValueError',
    'FirestoreDriver',
    'FirestoreDriverOptions',
]
