from pydantic import BaseModel, ConfigDict, Field


class SelectionSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    service_id: str | None = Field(default=None, serialization_alias="serviceId")
    staff_id: str | None = Field(default=None, serialization_alias="staffId")
    date: str | None = None
    time: str | None = None


class StepOptionSchema(BaseModel):
    value: str
    label: str
    path: str
    available: bool = True
    reason: str | None = None


class StepViewSchema(BaseModel):
    business_id: str
    current_step: str
    accessible_steps: list[str]
    back_target: str
    back_path: str
    next_path: str | None = None
    selection: SelectionSchema
    options: list[StepOptionSchema] = Field(default_factory=list)
    reset_fields: list[str] = Field(default_factory=list)


class NavigationErrorSchema(BaseModel):
    detail: str
    step: str
    redirect_to: str
    redirect_path: str | None = None


class CalendarDaySchema(BaseModel):
    date: str
    selectable: bool
    is_today: bool
    reason: str | None = None


class CalendarSchema(BaseModel):
    min_date: str
    max_date: str
    year: int
    month: int
    can_go_previous: bool
    can_go_next: bool
    disabled_dates: list[str]
    days: list[CalendarDaySchema]


class TimeSlotSchema(BaseModel):
    time: str
    available: bool
    reason: str | None = None


class TimeSlotsSchema(BaseModel):
    date: str
    service_id: str
    slots: list[TimeSlotSchema]


class AppointmentRequestSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    service_id: str = Field(alias="serviceId")
    staff_id: str | None = Field(default=None, alias="staffId")
    date: str
    start_time: str = Field(alias="startTime")
    customer_notes: str | None = Field(default=None, alias="customerNotes")


class AppointmentCreatedSchema(BaseModel):
    appointment_id: str


class ValidationErrorSchema(BaseModel):
    valid: bool = False
    field_errors: dict[str, str]
    slot_violation: str | None = None
