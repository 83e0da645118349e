
class LibraryAPIError(Exception): pass

class NotFoundError(LibraryAPIError): pass

class ItemNotFoundError(NotFoundError): pass

class LoanNotFoundError(NotFoundError): pass

class OutOfStockError(LibraryAPIError): pass

class InvalidItemError(LibraryAPIError): pass

class CoverUploadError(LibraryAPIError): pass

class TransactionFailure(LibraryAPIError): pass

class LockTimeoutError(TransactionFailure): pass
