"""
Typed Exception Hierarchy for the Blueprint Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (a UI, a CLI, an API layer) decide the user-facing message for every
failure.  They must be able to do that without parsing message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        state.create_contract(name, blueprint_id)
    except Exception as e:
        if "not found" in str(e):  # FRAGILE - message might change
            show_missing_blueprint()

Example - RIGHT way (what this module enables):
    try:
        state.create_contract(name, blueprint_id)
    except BlueprintNotFoundError as e:
        show_missing_blueprint(e.blueprint_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from BlueprintKernelError:

    BlueprintKernelError (base)
    |
    +-- NotFoundError
    |   +-- BlueprintNotFoundError
    |   +-- ContractNotFoundError
    |
    +-- ValidationError
    |   +-- BlueprintValidationError
    |   +-- ContractValidationError
    |   +-- UnknownFieldTypeError
    |   +-- FieldValueTypeError
    |
    +-- SnapshotError
        +-- SnapshotDecodeError
        +-- SnapshotPersistError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Not found       | BLUEPRINT_NOT_FOUND         | Blueprint ID doesn't exist
                | CONTRACT_NOT_FOUND          | Contract ID doesn't exist
----------------|-----------------------------|-----------------------------------------
Validation      | BLUEPRINT_VALIDATION_ERROR  | Empty name, no fields, duplicate field id
                | CONTRACT_VALIDATION_ERROR   | Empty name, field id set / kind mismatch
                | UNKNOWN_FIELD_TYPE          | Field kind outside the closed enumeration
                | FIELD_VALUE_TYPE_MISMATCH   | Boolean in a text slot or vice versa
----------------|-----------------------------|-----------------------------------------
Snapshot        | SNAPSHOT_DECODE_ERROR       | Stored blob has the wrong shape
                | SNAPSHOT_PERSIST_ERROR      | Durable write failed

===============================================================================
WHAT IS NOT AN EXCEPTION
===============================================================================

1. Invalid lifecycle transitions.  ``advance`` / ``revoke`` from a status
   with no valid edge are expected (double clicks, stale screens) and are
   reported as ``TransitionResult(success=False)``.

2. Field edits on a locked or revoked contract.  The edit is dropped
   silently; the contract is returned unchanged.

===============================================================================
"""


class BlueprintKernelError(Exception):
    """
    Base exception for all blueprint kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BLUEPRINT_KERNEL_ERROR"


# Not-found exceptions


class NotFoundError(BlueprintKernelError):
    """Base exception for references to ids that do not exist."""

    code: str = "NOT_FOUND"


class BlueprintNotFoundError(NotFoundError):
    """Blueprint with given ID was not found."""

    code: str = "BLUEPRINT_NOT_FOUND"

    def __init__(self, blueprint_id: str):
        self.blueprint_id = blueprint_id
        super().__init__(f"Blueprint not found: {blueprint_id}")


class ContractNotFoundError(NotFoundError):
    """Contract with given ID was not found."""

    code: str = "CONTRACT_NOT_FOUND"

    def __init__(self, contract_id: str):
        self.contract_id = contract_id
        super().__init__(f"Contract not found: {contract_id}")


# Validation exceptions


class ValidationError(BlueprintKernelError):
    """Caller-supplied data violates a structural invariant."""

    code: str = "VALIDATION_ERROR"


class BlueprintValidationError(ValidationError):
    """Blueprint definition is structurally invalid."""

    code: str = "BLUEPRINT_VALIDATION_ERROR"

    def __init__(self, reason: str, field: str | None = None):
        self.reason = reason
        self.field = field
        super().__init__(f"Invalid blueprint: {reason}")


class ContractValidationError(ValidationError):
    """Contract data is structurally invalid."""

    code: str = "CONTRACT_VALIDATION_ERROR"

    def __init__(self, contract_id: str | None, reason: str):
        self.contract_id = contract_id
        self.reason = reason
        super().__init__(
            f"Invalid contract {contract_id}: {reason}"
            if contract_id
            else f"Invalid contract: {reason}"
        )


class UnknownFieldTypeError(ValidationError):
    """Field kind is not one of the registered field types."""

    code: str = "UNKNOWN_FIELD_TYPE"

    def __init__(self, field_type: str):
        self.field_type = field_type
        super().__init__(f"Unknown field type: {field_type!r}")


class FieldValueTypeError(ValidationError):
    """
    Value does not belong to the value domain of its slot.

    Checkbox slots only hold booleans; every other slot only holds strings.
    """

    code: str = "FIELD_VALUE_TYPE_MISMATCH"

    def __init__(self, expected: str, received: str, field_id: str | None = None):
        self.expected = expected
        self.received = received
        self.field_id = field_id
        where = f" for field {field_id}" if field_id else ""
        super().__init__(
            f"Expected {expected} value{where}, received {received}"
        )


# Snapshot exceptions


class SnapshotError(BlueprintKernelError):
    """Base exception for persisted snapshot errors."""

    code: str = "SNAPSHOT_ERROR"


class SnapshotDecodeError(SnapshotError):
    """Stored blob does not have the expected snapshot shape."""

    code: str = "SNAPSHOT_DECODE_ERROR"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot decode snapshot at {path}: {reason}")


class SnapshotPersistError(SnapshotError):
    """
    Durable write of the snapshot failed.

    The in-memory state is left at the last successfully persisted snapshot.
    """

    code: str = "SNAPSHOT_PERSIST_ERROR"

    def __init__(self, storage_key: str, operation: str):
        self.storage_key = storage_key
        self.operation = operation
        super().__init__(
            f"Failed to persist snapshot {storage_key!r} after {operation}"
        )
