"""
Управление проектом - CLI команды.

Использование:
    python manage.py check-db
    python manage.py reset-db
    python manage.py seed-db
    python manage.py create-tables
    python manage.py soft-delete <username>
"""

import argparse
import sys

from bbs import config
from bbs.core.database import Base, SessionLocal, engine
from bbs.core.exceptions import BBSError
from bbs.core.snowflake import IdentityIssuer
from bbs.services.account_store import AccountStore
from bbs.services.auth_service import AuthService


def check_db(args):
    """Проверка базы данных - показать всех пользователей"""
    db = SessionLocal()

    try:
        accounts = AccountStore(db).list_accounts(include_deleted=True)

        print(f"\n📊 Всего аккаунтов в БД: {len(accounts)}\n")
        print("=" * 60)

        if not accounts:
            print("⚠️  База данных пустая.")
            print("   Зарегистрируйте пользователя через POST /auth/register\n")
            return

        for account in accounts:
            print(f"ID: {account.user_id}")
            print(f"Email: {account.email}")
            print(f"Username: {account.username}")
            print(f"Пароль (хеш): {account.password[:29]}...")
            print(f"Создан: {account.created_at}")
            if account.is_deleted:
                print(f"Удалён: {account.deleted_at}")
            print("-" * 60)

    finally:
        db.close()


def reset_db(args):
    """Сброс базы данных (удалить все таблицы и создать заново)"""
    print("⚠️  ВНИМАНИЕ: Это удалит все данные из БД!")
    confirm = input("Продолжить? (yes/no): ")

    if confirm.lower() != "yes":
        print("❌ Отменено")
        return

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print("✅ База данных сброшена\n")


def seed_db(args):
    """Заполнить БД тестовыми пользователями"""
    db = SessionLocal()
    service = AuthService(AccountStore(db), IdentityIssuer(node_id=config.NODE_ID))

    test_users = [
        {"name": "user1", "email": "user1@test.com", "password": "password123"},
        {"name": "user2", "email": "user2@test.com", "password": "password123"},
        {"name": "admin", "email": "admin@test.com", "password": "admin12345"},
    ]

    try:
        for user_data in test_users:
            try:
                account = service.register(**user_data)
            except BBSError as e:
                print(f"⚠️  {user_data['name']}: {e.message}")
                continue
            print(f"✅ Создан пользователь: {account.username} (id={account.user_id})")
    finally:
        db.close()

    print("\n✅ Тестовые данные добавлены\n")


def create_tables(args):
    """Создать таблицы в БД (если их нет)"""
    Base.metadata.create_all(bind=engine)
    print("✅ Таблицы созданы\n")


def soft_delete(args):
    """Пометить аккаунт удалённым"""
    db = SessionLocal()

    try:
        store = AccountStore(db)
        account = store.find_by_username(args.username)
        if account is None:
            print(f"❌ Пользователь {args.username} не найден")
            return 1

        store.soft_delete(account)
        print(f"✅ Пользователь {args.username} помечен удалённым")
    finally:
        db.close()


def main(argv=None):
    """Главная функция - обработка команд"""
    parser = argparse.ArgumentParser(
        description="Управление проектом BBS Auth API"
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Команда для выполнения")

    subparsers.add_parser("check-db").set_defaults(func=check_db)
    subparsers.add_parser("reset-db").set_defaults(func=reset_db)
    subparsers.add_parser("seed-db").set_defaults(func=seed_db)
    subparsers.add_parser("create-tables").set_defaults(func=create_tables)

    delete_parser = subparsers.add_parser("soft-delete")
    delete_parser.add_argument("username", help="Имя пользователя")
    delete_parser.set_defaults(func=soft_delete)

    args = parser.parse_args(argv)

    # Выполнение команды
    return args.func(args) or 0


if __name__ == "__main__":
    sys.exit(main())
