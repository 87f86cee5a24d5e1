"""Fulfillable document use cases: sales, purchase orders, orders and deliveries."""

from stockcore.application.dto.requests import (
    CreateDeliveryRequest,
    CreateOrderRequest,
    CreatePurchaseOrderRequest,
    CreateSaleRequest,
    ReceivePurchaseOrderRequest,
    SetDeliveryStatusRequest,
    SetOrderStatusRequest,
    SetPurchaseOrderStatusRequest,
    to_lines,
)
from stockcore.application.use_cases.base import StockUseCase
from stockcore.config import get_logger
from stockcore.core.entities import (
    Delivery,
    Order,
    PurchaseOrder,
    Sale,
    SaleStatus,
)

logger = get_logger(__name__)


# Sales


class CreateSaleUseCase(StockUseCase):
    async def execute(self, request: CreateSaleRequest) -> Sale:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._sale_workflow(uow)
            return await workflow.create(
                request.location_id,
                to_lines(request.lines),
                customer_ref=request.customer_ref,
                note=request.note,
            )


class PostSaleUseCase(StockUseCase):
    """Post a sale: every line leaves stock, or none does."""

    async def execute(self, sale_id: int) -> Sale:
        logger.info("post_sale_started", sale_id=sale_id)
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._sale_workflow(uow)
            sale = await workflow.post(sale_id)
        logger.info("post_sale_complete", sale_id=sale_id, number=sale.number)
        return sale


class CancelSaleUseCase(StockUseCase):
    async def execute(self, sale_id: int) -> Sale:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._sale_workflow(uow)
            return await workflow.set_status(sale_id, SaleStatus.CANCELLED)


class SaleQueryUseCase(StockUseCase):
    async def get(self, sale_id: int) -> Sale:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._sale_workflow(uow)
            return await workflow.get(sale_id)


# Purchase orders


class CreatePurchaseOrderUseCase(StockUseCase):
    async def execute(self, request: CreatePurchaseOrderRequest) -> PurchaseOrder:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._purchase_order_workflow(uow)
            return await workflow.create(
                request.location_id,
                to_lines(request.lines),
                supplier_ref=request.supplier_ref,
                note=request.note,
            )


class SetPurchaseOrderStatusUseCase(StockUseCase):
    async def execute(
        self, purchase_order_id: int, request: SetPurchaseOrderStatusRequest
    ) -> PurchaseOrder:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._purchase_order_workflow(uow)
            return await workflow.set_status(purchase_order_id, request.status)


class ReceivePurchaseOrderUseCase(StockUseCase):
    """Receive goods against an ORDERED purchase order."""

    async def execute(
        self, purchase_order_id: int, request: ReceivePurchaseOrderRequest
    ) -> PurchaseOrder:
        logger.info("receive_purchase_order_started", purchase_order_id=purchase_order_id)
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._purchase_order_workflow(uow)
            order = await workflow.receive(
                purchase_order_id, to_lines(request.lines), note=request.note
            )
        logger.info(
            "receive_purchase_order_complete",
            purchase_order_id=purchase_order_id,
            status=order.status.value,
        )
        return order


class PurchaseOrderQueryUseCase(StockUseCase):
    async def get(self, purchase_order_id: int) -> PurchaseOrder:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._purchase_order_workflow(uow)
            return await workflow.get(purchase_order_id)


# Orders


class CreateOrderUseCase(StockUseCase):
    async def execute(self, request: CreateOrderRequest) -> Order:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._order_workflow(uow)
            return await workflow.create(
                request.location_id,
                to_lines(request.lines),
                customer_ref=request.customer_ref,
                note=request.note,
            )


class SetOrderStatusUseCase(StockUseCase):
    async def execute(self, order_id: int, request: SetOrderStatusRequest) -> Order:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._order_workflow(uow)
            return await workflow.set_status(order_id, request.status)


class OrderQueryUseCase(StockUseCase):
    async def get(self, order_id: int) -> Order:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._order_workflow(uow)
            return await workflow.get(order_id)


# Deliveries


class CreateDeliveryUseCase(StockUseCase):
    async def execute(self, request: CreateDeliveryRequest) -> Delivery:
        logger.info("create_delivery_started", kind=request.source.kind)
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._delivery_workflow(uow)
            delivery = await workflow.create(request.source)
        logger.info("create_delivery_complete", delivery_id=delivery.id, number=delivery.number)
        return delivery


class SetDeliveryStatusUseCase(StockUseCase):
    """Move a delivery along its graph; delivered statuses fulfill source lines once."""

    async def execute(self, delivery_id: int, request: SetDeliveryStatusRequest) -> Delivery:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._delivery_workflow(uow)
            return await workflow.set_status(delivery_id, request.status, message=request.message)


class DeliveryQueryUseCase(StockUseCase):
    async def get(self, delivery_id: int) -> Delivery:
        factory = await self._get_uow_factory()
        async with factory() as uow:
            workflow = await self._delivery_workflow(uow)
            return await workflow.get(delivery_id)
