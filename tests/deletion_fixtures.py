"""
Banco temporário e massa de dados para os testes de exclusão
"""

import os
import sys
import tempfile

# Adiciona o diretório raiz ao path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.database import Database, now_str
from core.models import DEFAULT_LANGUAGE, DEFAULT_THEME

TABLES = ("users", "addresses", "orders", "order_items", "user_preferences",
          "payment_methods", "deletion_requests")


def make_db(testcase) -> Database:
    """Cria um banco SQLite num diretório temporário, removido ao fim do teste"""
    tmp = tempfile.TemporaryDirectory()
    testcase.addCleanup(tmp.cleanup)
    db = Database(os.path.join(tmp.name, "acucaradas_test.db"))
    testcase.addCleanup(db.close)
    return db


def seed_user(db: Database, name="Maria", email=None, order_items=(3, 0),
              addresses=1, payments=1, preferences=True) -> int:
    """
    Cria um usuário com seus dependentes.

    order_items: quantidade de itens de cada pedido (um pedido por elemento)
    """
    email = email or f"{name.lower()}@exemplo.com"
    with db.transaction() as cur:
        cur.execute("INSERT INTO users(name, email, password, phone, created_at) VALUES (?,?,?,?,?)",
                    (name, email, "$2b$12$hash", "11999990000", now_str()))
        user_id = cur.lastrowid
        address_ids = []
        for i in range(addresses):
            cur.execute(
                "INSERT INTO addresses(user_id, street, number, city, state, zipcode, is_default) "
                "VALUES (?,?,?,?,?,?,?)",
                (user_id, f"Rua {i + 1}", str(100 + i), "São Paulo", "SP", "01000-000", int(i == 0))
            )
            address_ids.append(cur.lastrowid)
        for n_items in order_items:
            cur.execute(
                "INSERT INTO orders(user_id, address_id, total, status, payment_method, created_at) "
                "VALUES (?,?,?,?,?,?)",
                (user_id, address_ids[0] if address_ids else None, 50.0, "entregue", "pix", now_str())
            )
            order_id = cur.lastrowid
            for j in range(n_items):
                cur.execute("INSERT INTO order_items(order_id, product_id, quantity, price) VALUES (?,?,?,?)",
                            (order_id, j + 1, 1, 12.5))
        for i in range(payments):
            cur.execute(
                "INSERT INTO payment_methods(user_id, type, card_number, card_holder, expiry_date, is_default) "
                "VALUES (?,?,?,?,?,?)",
                (user_id, "credit", f"**** 000{i}", name, "12/30", int(i == 0))
            )
        if preferences:
            cur.execute(
                "INSERT INTO user_preferences(user_id, notifications_enabled, theme, language) VALUES (?,?,?,?)",
                (user_id, 1, DEFAULT_THEME, DEFAULT_LANGUAGE)
            )
    return user_id


def count_for(db: Database, user_id: int) -> dict:
    """Contagem de linhas do usuário em cada tabela dependente"""
    return {
        "users": db.count("users", "id=?", (user_id,)),
        "addresses": db.count("addresses", "user_id=?", (user_id,)),
        "orders": db.count("orders", "user_id=?", (user_id,)),
        "order_items": db.count(
            "order_items", "order_id IN (SELECT id FROM orders WHERE user_id=?)", (user_id,)
        ),
        "payment_methods": db.count("payment_methods", "user_id=?", (user_id,)),
        "user_preferences": db.count("user_preferences", "user_id=?", (user_id,)),
    }


def snapshot(db: Database) -> dict:
    """Conteúdo completo de todas as tabelas (para comparar antes/depois)"""
    return {t: [tuple(r) for r in db.query(f"SELECT * FROM {t} ORDER BY rowid")] for t in TABLES}
