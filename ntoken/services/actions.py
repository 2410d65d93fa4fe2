"""
Typed payloads for ledger actions submitted in a batch.
"""

from typing import Any, Dict, List, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ntoken.contracts import MAX_PARENT_ID, MAX_SYMBOL_ID, NAsset, Symbol
from ntoken.utils.crypto import is_valid_principal


class SymbolModel(BaseModel):
    id: int = Field(ge=0, le=MAX_SYMBOL_ID, description="Symbol id; 0 asks create to allocate one")
    parent_id: int = Field(default=0, ge=0, le=MAX_PARENT_ID, description="Family (collection) id")

    def to_symbol(self) -> Symbol:
        return Symbol(id=self.id, parent_id=self.parent_id)


class AssetModel(BaseModel):
    amount: int
    symbol: SymbolModel

    def to_asset(self) -> NAsset:
        return NAsset(amount=self.amount, symbol=self.symbol.to_symbol())


class CreateAction(BaseModel):
    issuer: str
    max_supply: int
    symbol: SymbolModel
    token_uri: str = ""
    ip_owner: str = ""


class IssueAction(BaseModel):
    to: str
    quantity: AssetModel
    memo: str = ""


class RetireAction(BaseModel):
    quantity: AssetModel
    memo: str = ""


class BurnAction(BaseModel):
    owner: str
    quantity: AssetModel
    memo: str = ""


class ReclaimAction(BaseModel):
    target: str
    symbol: SymbolModel
    memo: str = ""


class TransferAction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_account: str = Field(alias="from")
    to: str
    assets: List[AssetModel]
    memo: str = ""


class TransferFromAction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    owner: str = Field(description="The delegate spending the allowance")
    from_account: str = Field(alias="from")
    to: str
    assets: List[AssetModel]
    memo: str = ""


class ApproveAction(BaseModel):
    owner: str
    spender: str
    parent_id: int = Field(ge=0, le=MAX_PARENT_ID)
    amount: int


class SetNotaryAction(BaseModel):
    notary: str
    add: bool


class SetTokenUriAction(BaseModel):
    symbol_id: int = Field(ge=0, le=MAX_SYMBOL_ID)
    url: str


class SetIpOwnerAction(BaseModel):
    symbol_id: int = Field(ge=0, le=MAX_SYMBOL_ID)
    owner: str = ""


class NotarizeAction(BaseModel):
    notary: str
    symbol_id: int = Field(ge=0, le=MAX_SYMBOL_ID)


class SetAccountPermissionsAction(BaseModel):
    issuer: str
    to: str
    symbol: SymbolModel
    allow_send: bool
    allow_recv: bool


class SetCreatorAction(BaseModel):
    creator: str
    add: bool


class SetCheckAction(BaseModel):
    check_creator: bool


ACTION_MODELS: Dict[str, Type[BaseModel]] = {
    "create": CreateAction,
    "issue": IssueAction,
    "retire": RetireAction,
    "burn": BurnAction,
    "reclaim": ReclaimAction,
    "transfer": TransferAction,
    "transferfrom": TransferFromAction,
    "approve": ApproveAction,
    "setnotary": SetNotaryAction,
    "settokenuri": SetTokenUriAction,
    "setipowner": SetIpOwnerAction,
    "notarize": NotarizeAction,
    "setacctperms": SetAccountPermissionsAction,
    "setcreator": SetCreatorAction,
    "setcheck": SetCheckAction,
}


class ActionEnvelope(BaseModel):
    name: str
    authorization: List[str] = Field(default_factory=list, description="Principals that signed the action")
    data: Dict[str, Any] = Field(default_factory=dict)


class ActionBatch(BaseModel):
    accounts: List[str] = Field(default_factory=list, description="Known accounts for this execution")
    actions: List[ActionEnvelope] = Field(default_factory=list)

    @field_validator("accounts")
    @classmethod
    def check_account_names(cls, v: List[str]) -> List[str]:
        invalid = [name for name in v if not is_valid_principal(name)]
        if invalid:
            raise ValueError(f"Malformed account names: {invalid}")
        return v
