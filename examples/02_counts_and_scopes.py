"""
Example 02: Counts, Scopes and Repositories

This example attaches relation counts, filters eager loads with scopes and
wraps both in a Repository subclass.
"""

from typing import Optional

from row_orm import ConnectionConfig, Engine, Model, Repository, belongs_to, has_many


class Customer(Model):
    orders = has_many("Order")


class Order(Model):
    customer = belongs_to("Customer")


def paid(query):
    return query.where("status", "paid")


class CustomerRepository(Repository[Customer]):
    """Repository for Customer records"""

    def __init__(self, engine: Engine):
        super().__init__(engine, Customer)

    def with_paid_orders(self) -> list[Customer]:
        return (
            self.with_relations({"orders": paid})
            .with_counts("orders")
            .order_by("id")
            .fetch_all()
        )

    def find_with_orders(self, customer_id: int) -> Optional[Customer]:
        return self.with_relations("orders").find(customer_id)


def main():
    engine = Engine.from_config(
        ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)
    )
    for statement in [
        "CREATE TABLE customers (id INTEGER PRIMARY KEY, name TEXT)",
        "CREATE TABLE orders (id INTEGER PRIMARY KEY, customer_id INTEGER, status TEXT)",
        "INSERT INTO customers VALUES (1, 'Acme'), (2, 'Globex'), (3, 'Initech')",
        "INSERT INTO orders VALUES (1, 1, 'paid'), (2, 1, 'open'), (3, 2, 'paid')",
    ]:
        engine.execute(statement)

    repo = CustomerRepository(engine)
    for customer in repo.with_paid_orders():
        # orders_count counts every order; the loaded list is scoped to paid ones
        print(f"{customer.name}: {len(customer.orders)} paid of {customer.orders_count}")

    acme = repo.find_with_orders(1)
    print(acme.to_dict())

    engine.close()


if __name__ == "__main__":
    main()
