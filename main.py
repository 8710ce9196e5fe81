import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, NamedTuple, Optional, Sequence

from fastapi import Depends, FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
import database
import payments
from auth import sign_token, verify_admin, verify_instructor, verify_jwt, verify_self
from schemas import (
    AdminCheck,
    ClassItem,
    ClassStatus,
    ClassUpdate,
    InstructorCheck,
    Payment,
    PaymentIntentRequest,
    PaymentIntentResponse,
    Role,
    SelectedClass,
    TokenRequest,
    TokenResponse,
    User,
    role_of,
)

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("summerchamp.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await run_in_threadpool(database.ping)
        logger.info("Pinged your deployment. Connected to MongoDB.")
    except (PyMongoError, RuntimeError) as e:
        logger.error("MongoDB ping failed: %s", e)
    yield
    logger.info("Application shutting down.")


app = FastAPI(title="SummerChamp API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error(request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# --- Health ---
def root():
    return PlainTextResponse("Summer Camp is running")


# --- Tokens ---
def issue_token(claims: TokenRequest):
    return TokenResponse(token=sign_token(claims.model_dump(mode="json")))


# --- Users ---
def save_user(email: str, user: User):
    # also used to promote a user to a role; the path email is the key
    data = user.model_dump(mode="json", exclude_unset=True)
    data["email"] = email
    return database.upsert_document(database.USERS, {"email": email}, data)


def list_users():
    return database.get_documents(database.USERS)


def get_user(email: str):
    return database.find_document(database.USERS, {"email": email})


def check_admin(email: str):
    user = database.find_document(database.USERS, {"email": email})
    return AdminCheck(admin=role_of(user) is Role.admin)


def check_instructor(email: str):
    user = database.find_document(database.USERS, {"email": email})
    return InstructorCheck(instructor=role_of(user) is Role.instructor)


# --- Classes ---
def list_classes():
    # pending and denied classes are included, same as /admin/classes
    return database.get_documents(database.CLASSES)


def list_classes_by_available_seats():
    return database.get_documents(database.CLASSES, sort=[("availableSeats", -1)])


def list_approved_classes():
    return database.get_documents(database.CLASSES, {"status": ClassStatus.approved.value})


def get_class(id: str):
    return database.find_document(database.CLASSES, database.key_filter(id))


def update_class(id: str, update: ClassUpdate):
    data = update.model_dump(mode="json", exclude_unset=True)
    data.pop("_id", None)
    return database.upsert_document(database.CLASSES, database.key_filter(id), data)


def add_class(new_class: ClassItem):
    return database.create_document(
        database.CLASSES, new_class.model_dump(mode="json", exclude_none=True)
    )


def list_instructor_classes(email: str):
    return database.get_documents(database.CLASSES, {"instructorEmail": email})


def list_instructors():
    return database.get_documents(database.INSTRUCTORS)


# --- Selected classes ---
def save_selected_class(id: str, selected: SelectedClass):
    data = selected.model_dump(mode="json", exclude_unset=True)
    data.pop("_id", None)
    return database.upsert_document(database.SELECTED_CLASSES, {"_id": id}, data)


def list_selected_classes(email: Optional[str] = None):
    return database.get_documents(database.SELECTED_CLASSES, {"user": email})


def delete_selected_class(id: str):
    return database.delete_document(database.SELECTED_CLASSES, {"_id": id})


# --- Payments ---
def list_enrolled_classes(email: str):
    return database.get_documents(database.PAYMENTS, {"user": email})


def create_payment_intent(body: PaymentIntentRequest):
    return PaymentIntentResponse(clientSecret=payments.create_payment_intent(body.price))


def save_payment(payment: Payment):
    return payments.commit_payment(payment)


class Route(NamedTuple):
    method: str
    path: str
    gates: Sequence[Callable[..., Any]]
    handler: Callable[..., Any]


ADMIN = (verify_jwt, verify_admin)
INSTRUCTOR = (verify_jwt, verify_instructor)
SELF = (verify_jwt, verify_self)
TOKEN = (verify_jwt,)

ROUTES = (
    Route("GET", "/", (), root),
    Route("POST", "/jwt", (), issue_token),
    Route("PUT", "/users/{email}", (), save_user),
    Route("GET", "/users", ADMIN, list_users),
    Route("GET", "/users/admin/{email}", SELF, check_admin),
    Route("GET", "/users/instructor/{email}", SELF, check_instructor),
    Route("GET", "/users/{email}", (), get_user),
    Route("GET", "/classes", (), list_classes),
    Route("GET", "/admin/classes", ADMIN, list_classes),
    Route("GET", "/classesByAvailableSeats", (), list_classes_by_available_seats),
    Route("GET", "/approvedClasses", (), list_approved_classes),
    Route("GET", "/classes/{id}", TOKEN, get_class),
    Route("PUT", "/classes/{id}", ADMIN, update_class),
    Route("POST", "/classes", INSTRUCTOR, add_class),
    Route("GET", "/instructor/classes/{email}", INSTRUCTOR, list_instructor_classes),
    Route("GET", "/instructors", (), list_instructors),
    Route("PUT", "/selectedClasses/{id}", TOKEN, save_selected_class),
    Route("GET", "/selectedClasses", (), list_selected_classes),
    Route("DELETE", "/selectedClasses/{id}", (), delete_selected_class),
    Route("GET", "/enrolledClasses/{email}", TOKEN, list_enrolled_classes),
    Route("POST", "/create-payment-intent", TOKEN, create_payment_intent),
    Route("POST", "/payments", TOKEN, save_payment),
)

for route in ROUTES:
    app.add_api_route(
        route.path,
        route.handler,
        methods=[route.method],
        dependencies=[Depends(gate) for gate in route.gates],
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
