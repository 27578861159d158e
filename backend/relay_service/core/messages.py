"""
User-facing replies.

The bot's audience writes in Russian, so replies are in Russian.
"""

START = (
    "Я автоматический помощник, анализирующий ваше состояние здоровья. "
    "Вы можете ответить текстом или отправить PDF/DOCX либо скриншот."
)

CONNECTION_ERROR = "Ошибка соединения. Попробуйте ещё раз чуть позже."

IMAGE_TOO_LARGE = "Файл слишком большой. Пожалуйста, отправьте изображение до {limit} MB."
IMAGE_RECEIVED = "Изображение получено. Извлекаю текст…"
IMAGE_NO_TEXT = (
    "Не удалось извлечь текст из изображения 😕\n"
    "Пожалуйста, попробуйте отправить более чёткий скриншот или пришлите PDF/DOCX, либо ответьте текстом."
)
IMAGE_FAILED = (
    "Не удалось обработать изображение. "
    "Пожалуйста, отправьте более чёткий скриншот или пришлите PDF/DOCX."
)

DOCUMENT_TOO_LARGE = "Файл слишком большой. Пожалуйста, отправьте документ до {limit} MB."
DOCUMENT_RECEIVED = "Файл был принят. Получаю текст…"
DOCUMENT_NO_TEXT = (
    "Не удалось получить текст из файла 😕\n"
    "Лучше всего работают PDF (текстовые) или DOCX. "
    "Если это скан, отправьте фото или снимки экрана страниц."
)
DOCUMENT_FAILED = (
    "Файл не удалось обработать. Лучше всего работают PDF (текстовые) или DOCX. "
    "Для сканов используйте фотографии или снимки экрана."
)
