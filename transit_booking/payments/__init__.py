from transit_booking.payments.gateway import PaymentGateway, PaymentLink, PaystackGateway

__all__ = ["PaymentGateway", "PaymentLink", "PaystackGateway"]
