from pydantic import BaseModel, ConfigDict, Field, constr


class ProfessionalIn(BaseModel):
    name: constr(min_length=1, max_length=120)
    email: str | None = None
    specialty: constr(max_length=120) | None = None
    phone: str | None = None
    photo_url: str | None = None
    is_active: bool | None = True
    advance_balance: int = Field(0, description="Saldo de antecipados; negativo vira 0")
    user_id: int | None = Field(
        None, description="Usuário PROFESSIONAL que acessa o painel deste cadastro"
    )


class ProfessionalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str | None = None
    specialty: str | None = None
    phone: str | None = None
    photo_url: str | None = None
    is_active: bool
    advance_balance: int
    user_id: int | None = None


class AssociatedClientsIn(BaseModel):
    client_ids: list[str]


class ProfessionalDeletedOut(BaseModel):
    id: str
    appointments_removed: int
