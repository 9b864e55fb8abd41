from .client import WorldBankClient, DatasetCountryRiskSource

__all__ = ["WorldBankClient", "DatasetCountryRiskSource"]
