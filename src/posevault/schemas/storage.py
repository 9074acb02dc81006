from pydantic import BaseModel


class ObjectUploadResponse(BaseModel):
    ok: bool = True
    key: str
    size: int


class ObjectDeleteResponse(BaseModel):
    ok: bool = True
    key: str
