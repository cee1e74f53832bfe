import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.utils.response import error_response

logger = logging.getLogger(__name__)


class AppException(Exception):
    status_code = 400
    code = "BAD_REQUEST"
    default_message = "Requisição inválida"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


# --- generic ---------------------------------------------------------------

class NotFoundError(AppException):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Recurso não encontrado"


class UnauthenticatedError(AppException):
    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "Faça login para continuar"


class ForbiddenError(AppException):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Acesso negado"


# --- auth ------------------------------------------------------------------

class InvalidCredentialsError(AppException):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    default_message = "Email ou código inválidos"


class AdminNotFoundError(AppException):
    status_code = 401
    code = "ADMIN_NOT_FOUND"
    default_message = "Admin não encontrado"


class CodeNotFoundError(AppException):
    status_code = 404
    code = "CODE_NOT_FOUND"
    default_message = "Código de vinculação inválido"


class CodeAlreadyUsedError(AppException):
    status_code = 400
    code = "CODE_ALREADY_USED"
    default_message = "Este código já foi utilizado"


class EmailMismatchError(AppException):
    status_code = 403
    code = "EMAIL_MISMATCH"
    default_message = "O email da sua conta não corresponde ao cadastro"


# --- photo sync ------------------------------------------------------------

class InvalidFolderUrlError(AppException):
    status_code = 400
    code = "INVALID_FOLDER_URL"
    default_message = "URL do Google Drive inválida"


class NoImagesFoundError(AppException):
    status_code = 422
    code = "NO_IMAGES_FOUND"
    default_message = "Nenhuma imagem encontrada na pasta ou a pasta não é pública"


class SyncUnavailableError(AppException):
    status_code = 502
    code = "SYNC_UNAVAILABLE"
    default_message = "Não foi possível acessar o Google Drive, tente novamente"


class SyncFailedError(AppException):
    status_code = 500
    code = "SYNC_FAILED"
    default_message = "Falha ao importar as fotos, nenhuma alteração foi salva"


# --- orders ----------------------------------------------------------------

class EmptyCartError(AppException):
    code = "EMPTY_CART"
    default_message = "O carrinho está vazio"


class MissingDeliveryAddressError(AppException):
    code = "MISSING_DELIVERY_ADDRESS"
    default_message = "Informe o endereço de entrega"


class MissingPrintSizeError(AppException):
    code = "MISSING_PRINT_SIZE"
    default_message = "Selecione o tamanho de impressão para todas as fotos impressas"


class InvalidPhotoSelectionError(AppException):
    code = "INVALID_PHOTO_SELECTION"
    default_message = "Uma ou mais fotos não pertencem a este ensaio"


class IllegalStatusTransitionError(AppException):
    status_code = 409
    code = "ILLEGAL_STATUS_TRANSITION"
    default_message = "Transição de status não permitida"


# --- payments --------------------------------------------------------------

class OrderNotPayableError(AppException):
    status_code = 409
    code = "ORDER_NOT_PAYABLE"
    default_message = "Este pedido não está aguardando pagamento"


class PaymentInProgressError(AppException):
    status_code = 409
    code = "PAYMENT_IN_PROGRESS"
    default_message = "Já existe um pagamento pendente para este pedido"


class GatewayUnavailableError(AppException):
    status_code = 502
    code = "GATEWAY_UNAVAILABLE"
    default_message = "Serviço de pagamento indisponível, tente novamente"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.message, data={"code": exc.code}),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_response("Erro interno do servidor"),
        )
