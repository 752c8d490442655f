class CryptanalysisError(Exception):
    pass


class MalformedInputError(CryptanalysisError, ValueError):
    """
    Input that can never be processed, e.g. ciphertext that isn't a whole number of blocks
    """
    pass


class UnequalLengthError(CryptanalysisError, ValueError):
    pass


class OracleMisuseError(CryptanalysisError, RuntimeError):
    """
    An oracle was asked to encrypt before it was given its key and secret, or was given them twice
    """
    pass
