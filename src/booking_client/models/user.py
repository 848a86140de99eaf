from pydantic import BaseModel, ConfigDict, Field


class GeoPoint(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = "Point"
    coordinates: tuple[float, float] = (0.0, 0.0)  # GeoJSON order: (longitude, latitude)
    address: str = ""

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]


class AuthToken(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    email: str
    first_name: str = ""
    last_name: str = ""
    phone_number: str = ""
    location: GeoPoint | None = None
    is_admin: bool = False
    is_active: bool = True
    profile_image_url: str | None = None
    created_at: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class RegisterUserData(BaseModel):
    email: str
    first_name: str
    last_name: str
    phone_number: str = ""
    location: GeoPoint = Field(default_factory=GeoPoint)
    password: str
    is_admin: bool = False
    is_active: bool = True


class UpdateProfileData(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None


class UpdateLocationData(BaseModel):
    latitude: float
    longitude: float
    address: str = ""
