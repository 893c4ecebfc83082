from sqlalchemy import select

from booklend.models.category import Category


class CategoryRepo:
    def __init__(self, session):
        self.session = session

    def list_all(self):
        return self.session.execute(select(Category).order_by(Category.name)).scalars().all()

    def get(self, category_id: int):
        return self.session.get(Category, category_id)

    def add(self, category: Category):
        self.session.add(category)
        self.session.flush()
        return category
