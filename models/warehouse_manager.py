# models/warehouse_manager.py

from pydantic import BaseModel, Field


class WarehouseManagerAssign(BaseModel):
    user_id: str = Field(..., min_length=1, description="User to assign")
    warehouse_id: str = Field(..., min_length=1, description="Warehouse within the current company")
