class TransferError(Exception):
    """Base class for errors that abort a transfer before it reaches the network."""


class UnsupportedTokenError(TransferError):
    def __init__(self, symbol):
        self.symbol = symbol
        super().__init__(f"Token not supported: {symbol}")


class MissingCredentialError(TransferError):
    def __init__(self, variable="PRIVATE_KEY"):
        self.variable = variable
        super().__init__(
            f"Private key is undefined. Please set your environment variable {variable}."
        )


class InvalidAmountError(TransferError):
    pass


class MethodNotAllowedError(TransferError):
    def __init__(self, contract_id, method_name, kind):
        self.contract_id = contract_id
        self.method_name = method_name
        super().__init__(f"{method_name} is not an allowed {kind} method on {contract_id}")


class ConfigError(TransferError):
    pass
