from datetime import date, datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class ShopModel(BaseModel):
    """
    Base for every data contract in the package. Records are immutable
    snapshots; they can be built from the shop app's camelCase export keys
    or from the python field names, and dump back to the camelCase aliases.
    """

    class Config:
        populate_by_name = True
        frozen = True


# --- Input Records (owned by the shop app's data layer) ---


class SaleRecord(ShopModel):
    id: str
    item_name: str = Field(..., alias="itemName")
    quantity: int = Field(..., ge=0)
    price: float = Field(default=0.0, ge=0)  # unit price
    date: datetime


class StockItem(ShopModel):
    id: str
    item_name: str = Field(..., alias="itemName")
    category: str = ""
    quantity: int = Field(..., ge=0)
    price: float = Field(..., ge=0)
    expiry_date: Optional[date] = Field(default=None, alias="expiryDate")


class ExpenseRecord(ShopModel):
    id: str
    category: str
    amount: float = Field(..., ge=0)
    note: Optional[str] = None
    date: date


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    RECEIVED = "Received"
    PAID = "Paid"


class PaymentRecord(ShopModel):
    id: str
    name: str  # customer or supplier
    amount: float = Field(..., ge=0)
    status: PaymentStatus
    date: date
    type: Literal["customer", "supplier"]


# --- Smart Insights ---


class BestSeller(ShopModel):
    name: str
    quantity: int


class FallingDemandItem(ShopModel):
    name: str
    drop_percent: str = Field(..., alias="dropPercent")


class ReorderSuggestion(ShopModel):
    item: StockItem
    suggested: int = Field(..., gt=0)


class PeakHour(ShopModel):
    hour: str  # e.g. "2:00 - 2:59 PM"
    count: int


class InsightReport(ShopModel):
    generated_at: datetime = Field(..., alias="generatedAt")
    best_selling: list[BestSeller] = Field(default_factory=list, alias="bestSelling")
    restock_needed: list[StockItem] = Field(default_factory=list, alias="restockNeeded")
    slow_moving: list[StockItem] = Field(default_factory=list, alias="slowMoving")
    falling_demand: list[FallingDemandItem] = Field(
        default_factory=list, alias="fallingDemand"
    )
    suggested_reorders: list[ReorderSuggestion] = Field(
        default_factory=list, alias="suggestedReorders"
    )
    peak_hours: list[PeakHour] = Field(default_factory=list, alias="peakHours")


# --- Notifications ---


class NotificationType(str, Enum):
    LOW_STOCK = "lowStock"
    NEAR_EXPIRY = "nearExpiry"
    OUT_OF_STOCK = "outOfStock"


class Notification(ShopModel):
    id: str
    type: NotificationType
    message: str
    item_id: str = Field(..., alias="itemId")
    item_name: str = Field(..., alias="itemName")


# --- Dashboard / Reports ---


class DashboardStats(ShopModel):
    daily_sales: float = Field(default=0.0, alias="dailySales")
    total_sales: float = Field(default=0.0, alias="totalSales")
    total_expenses: float = Field(default=0.0, alias="totalExpenses")
    total_profit: float = Field(default=0.0, alias="totalProfit")
    stock_value: float = Field(default=0.0, alias="stockValue")
    pending_payments: float = Field(default=0.0, alias="pendingPayments")


class DailyPoint(ShopModel):
    date: date
    sales: float = 0.0
    expenses: float = 0.0
    profit: float = 0.0


class CategoryTotal(ShopModel):
    name: str
    value: float


class Activity(ShopModel):
    id: str
    type: Literal["sale", "expense", "payment"]
    description: str
    amount: float
    date: datetime


class DashboardReport(ShopModel):
    """Everything the dashboard page shows, in one payload."""

    stats: DashboardStats
    sales_trend: list[DailyPoint] = Field(default_factory=list, alias="salesTrend")
    monthly_series: list[DailyPoint] = Field(default_factory=list, alias="monthlySeries")
    expenses_by_category: list[CategoryTotal] = Field(
        default_factory=list, alias="expensesByCategory"
    )
    recent_activity: list[Activity] = Field(default_factory=list, alias="recentActivity")
    insights: InsightReport
