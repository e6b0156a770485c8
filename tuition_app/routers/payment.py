"""
Payment router handling checkout for approved matches.
A student pays for an application through a hosted checkout page, then the frontend
calls /payment-verify with the session id to record the payment.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from datetime import datetime
from typing import Optional

from tuition_app.database.database import get_db, Application, ApplicationStatus, Payment, TuitionPost, TuitionStatus
from tuition_app.payment_gateway import PaymentGateway, PaymentGatewayError, CheckoutSession, get_payment_gateway
from tuition_app.schemas.payment_schema import CheckoutRequest, CheckoutResponse, VerifyResponse
from tuition_app.utilities import store_error
from tuition_app.logger import logger

router = APIRouter(tags=['payments'])

def find_recorded_payment(db: Session, session: CheckoutSession) -> Optional[Payment]:
    """The payment already stored for this checkout session or its transaction, if any"""
    conditions = [Payment.session_id == session.id]
    if session.transaction_id:
        conditions.append(Payment.transaction_id == session.transaction_id)
    return db.query(Payment).filter(or_(*conditions)).first()

def confirm_payment(db: Session, session: CheckoutSession) -> Payment:
    """
    Record a paid checkout session.

    Saves the payment, approves the application it paid for and closes that
    application's tuition post. All writes are committed together, so a failure
    leaves none of them behind.

    Returns:
        Payment: The stored payment, or the existing one when this session was already recorded
    """
    existing = find_recorded_payment(db, session)
    if existing:
        logger.info(f"Checkout session {session.id} already recorded, skipping")
        return existing

    payment = Payment(
        session_id=session.id,
        transaction_id=session.transaction_id,
        amount=session.amount,
        student_email=session.customer_email,
        application_id=session.application_id,
        date=datetime.now()
    )
    db.add(payment)

    # get_by_id returns None for a missing or malformed id
    application = Application.get_by_id(db, session.application_id)
    if application:
        application.status = ApplicationStatus.APPROVED

        if application.tuition_id:
            tuition = TuitionPost.get_by_id(db, application.tuition_id)
            if tuition:
                tuition.status = TuitionStatus.CLOSED
    else:
        logger.warning(f"Checkout session {session.id} references unknown application {session.application_id}")

    db.commit()
    db.refresh(payment)
    return payment

@router.post('/create-checkout-session', response_model=CheckoutResponse)
def create_checkout_session(
    checkout: CheckoutRequest,
    gateway: PaymentGateway = Depends(get_payment_gateway)
):
    """
    Open a checkout session for hiring the tutor behind an application.

    Returns:
    - CheckoutResponse: The hosted checkout url to redirect the student to

    Raises:
    - HTTPException(500): With the gateway's message when the session cannot be created
    """
    try:
        session = gateway.create_checkout_session(
            application_id=checkout.application_id,
            amount=checkout.amount,
            tutor_name=checkout.tutor_name,
            student_email=checkout.student_email
        )
    except PaymentGatewayError as e:
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Checkout session {session.id} created for application {checkout.application_id}")
    return {"url": session.url}

@router.patch('/payment-verify', response_model=VerifyResponse)
def verify_payment(
    session_id: Optional[str] = None,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway)
):
    """
    Confirm a checkout session after the student returns from the payment page.

    Returns:
    - VerifyResponse: success is false when the session has not been paid

    Raises:
    - HTTPException(400): If no session id is given
    - HTTPException(500): If the gateway or the store fails
    """
    if not session_id:
        raise HTTPException(status_code=400, detail="Session id is required.")

    try:
        session = gateway.retrieve_session(session_id)
    except PaymentGatewayError:
        raise HTTPException(status_code=500, detail="Verification failed")

    if not session.paid:
        logger.info(f"Checkout session {session_id} is not paid yet")
        return {"success": False}

    try:
        payment = confirm_payment(db, session)
    except IntegrityError:
        # Recorded concurrently by another verify call for the same session
        db.rollback()
        logger.info(f"Checkout session {session_id} was recorded concurrently")
        return {"success": True}
    except SQLAlchemyError as e:
        raise store_error(db, e, "Verification failed")

    logger.info(f"Payment {payment.id} recorded for application {payment.application_id}")
    return {"success": True}
