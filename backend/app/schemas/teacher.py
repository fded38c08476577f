from pydantic import BaseModel, EmailStr, Field


class TeacherBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    bio: str | None = Field(default=None, max_length=2000)
    qualification: str | None = Field(default=None, max_length=200)


class TeacherCreate(TeacherBase):
    pass


class TeacherUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    bio: str | None = Field(default=None, max_length=2000)
    qualification: str | None = Field(default=None, max_length=200)


class TeacherOut(TeacherBase):
    id: str

    model_config = {"from_attributes": True}
