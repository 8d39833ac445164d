# canteen/menu_service/main.py
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Menu Service (dev mock)")


MENU = {
    "1": {"id": "1", "name": "Tomato Soup", "description": "Low-sodium tomato soup", "price": "5.99",
          "category": "Soups", "allergens": ["celery"], "available": True},
    "2": {"id": "2", "name": "Grilled Chicken Plate", "description": "Chicken breast, rice, steamed vegetables",
          "price": "8.99", "category": "Mains", "allergens": [], "available": True},
    "3": {"id": "3", "name": "Fruit Yoghurt", "description": "Plain yoghurt with seasonal fruit", "price": "2.49",
          "category": "Desserts", "allergens": ["milk"], "available": True},
    "4": {"id": "4", "name": "Fish Pie", "description": "Cod and potato pie", "price": "9.49",
          "category": "Mains", "allergens": ["fish", "milk", "gluten"], "available": False},
}


@app.get("/menu")
def list_menu():
    return list(MENU.values())


@app.get("/menu/{menu_item_id}")
def get_menu_item(menu_item_id: str):
    item = MENU.get(menu_item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item
